from .cli import dirhash_main

if __name__ == '__main__':
    dirhash_main()
