import os
import tempfile
import unittest
from pathlib import Path

from dirhash.utils.processor import digest_file
from dirhash.utils.profiling import PROFILE_ENV, SESSION_ENV, profiled, profiling, session_directory


class ProfilingTest(unittest.TestCase):
    def setUp(self):
        self._saved = {name: os.environ.pop(name, None) for name in (PROFILE_ENV, SESSION_ENV)}
        self._tmpdir = tempfile.TemporaryDirectory()
        self.profile_root = Path(self._tmpdir.name) / "profiles"

    def tearDown(self):
        for name, value in self._saved.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value
        self._tmpdir.cleanup()

    def test_disabled_by_default(self):
        self.assertIsNone(session_directory())

        with profiling("main") as profiler:
            self.assertIsNone(profiler)

        @profiled("main")
        def add(a, b):
            return a + b

        self.assertEqual(5, add(2, 3))
        self.assertNotIn(SESSION_ENV, os.environ)

    def test_session_chosen_once_and_exported(self):
        os.environ[PROFILE_ENV] = str(self.profile_root)

        first = session_directory()
        second = session_directory()

        self.assertEqual(first, second)
        self.assertEqual(self.profile_root, first.parent)
        self.assertEqual(first.name, os.environ[SESSION_ENV])
        start_ms, pid = first.name.split('_')
        self.assertTrue(start_ms.isdigit())
        self.assertEqual(str(os.getpid()), pid)

    def test_inherited_session_is_reused(self):
        os.environ[PROFILE_ENV] = str(self.profile_root)
        os.environ[SESSION_ENV] = "1_1"

        self.assertEqual(self.profile_root / "1_1", session_directory())

    def test_dump_named_by_role(self):
        os.environ[PROFILE_ENV] = str(self.profile_root)

        @profiled("main")
        def main_func():
            return "done"

        self.assertEqual("done", main_func())

        dumps = list(session_directory().glob("*.prof"))
        self.assertEqual(1, len(dumps))
        role, pid, seq = dumps[0].stem.split('_')
        self.assertEqual("main", role)
        self.assertEqual(str(os.getpid()), pid)
        self.assertTrue(seq.isdigit())

    def test_dump_written_when_block_raises(self):
        os.environ[PROFILE_ENV] = str(self.profile_root)

        with self.assertRaises(ValueError):
            with profiling("main"):
                raise ValueError("failure")

        self.assertEqual(1, len(list(session_directory().glob("main_*.prof"))))

    def test_digest_is_profiled(self):
        os.environ[PROFILE_ENV] = str(self.profile_root)
        data = Path(self._tmpdir.name) / "data.bin"
        data.write_bytes(b"payload")

        self.assertEqual(7, digest_file(data)[0])
        self.assertEqual(7, digest_file(data)[0])

        self.assertEqual(2, len(list(session_directory().glob("digest_*.prof"))))

    def test_preserves_function_attributes(self):
        @profiled("main")
        def documented() -> int:
            """Documented."""
            return 42

        self.assertEqual("documented", documented.__name__)
        self.assertEqual("Documented.", documented.__doc__)


if __name__ == '__main__':
    unittest.main()
