import unittest
from unittest.mock import MagicMock, patch
import json
import os
import sys
import tempfile
from pathlib import Path

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.append(os.path.dirname(os.path.abspath(__file__)))
from config import Settings
from favicon_generator import planner
from favicon_generator.errors import DecodeError, InputError, IoError, PathConflictError, RenderError, UserAbort
from favicon_generator.orchestrator import check_output_dir, run
from favicon_generator.prompt import FixedPrompt, PromptAnswer
from fakes import FakeEngine

EXPECTED_PNG_SIZES = (16, 32, 57, 60, 64, 72, 76, 95, 114, 120, 144, 152, 160, 180, 196)


class TestOrchestrator(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self.tmp.name)
        self.raster_input = self.tmp_path / "logo.png"
        self.raster_input.write_bytes(b"PNG 512x512")
        self.vector_input = self.tmp_path / "logo.svg"
        self.vector_input.write_bytes(b"SVG <svg/>")
        self.output_dir = self.tmp_path / "out"

    def tearDown(self):
        self.tmp.cleanup()

    def settings(self, **overrides):
        values = {
            "input_path": self.raster_input,
            "output_path": self.output_dir,
            "workers": 2,
        }
        values.update(overrides)
        return Settings(**values)

    def test_run_with_defaults(self):
        """
        Tests that a default run writes the ICO, every PNG and the manifest.
        """
        engine = FakeEngine()
        report = run(self.settings(), engine=engine, prompt=MagicMock())

        names = sorted(p.name for p in self.output_dir.iterdir())
        expected = sorted(
            ["favicon.ico", "manifest.json"] + [f"favicon-{size}.png" for size in EXPECTED_PNG_SIZES]
        )
        self.assertEqual(names, expected)
        self.assertEqual((self.output_dir / "favicon.ico").read_bytes(), b"ICO:48,32,16")

        manifest = json.loads((self.output_dir / "manifest.json").read_text())
        self.assertEqual(manifest["name"], "App")
        self.assertEqual(
            [icon["src"] for icon in manifest["icons"]],
            [f"/favicon-{size}.png" for size in (16, 32, 64, 95, 160, 196)],
        )
        self.assertEqual(len(report.written), len(expected))
        self.assertIn('href="/manifest.json"', report.html)

    def test_run_raster_is_sharpened(self):
        engine = FakeEngine()
        run(self.settings(), engine=engine, prompt=MagicMock())
        self.assertTrue(engine.render_calls)
        for config in engine.render_calls:
            self.assertEqual(config.sharpen, planner.DEFAULT_SHARPEN_AMOUNT)

    def test_run_no_sharpen_flag(self):
        engine = FakeEngine()
        run(self.settings(no_sharpen=True), engine=engine, prompt=MagicMock())
        for config in engine.render_calls:
            self.assertEqual(config.sharpen, 0)

    def test_run_vector_overrides_sharpen_flag(self):
        engine = FakeEngine()
        run(self.settings(input_path=self.vector_input), engine=engine, prompt=MagicMock())
        self.assertTrue(engine.render_calls)
        for config in engine.render_calls:
            self.assertEqual(config.sharpen, 0)
            self.assertEqual(config.crop, planner.CropPolicy.CENTER)

    def test_directory_in_place_of_file_is_a_conflict(self):
        (self.output_dir / "favicon.ico").mkdir(parents=True)
        engine = FakeEngine()

        with self.assertRaises(PathConflictError) as ctx:
            run(self.settings(overwrite=True), engine=engine, prompt=MagicMock())

        self.assertEqual(ctx.exception.path, self.output_dir / "favicon.ico")
        self.assertEqual(engine.render_calls, [])
        self.assertFalse((self.output_dir / "manifest.json").exists())

    def test_output_path_is_a_file(self):
        self.output_dir.write_text("not a directory")
        with self.assertRaises(PathConflictError):
            run(self.settings(), engine=FakeEngine(), prompt=MagicMock())

    def test_symlinked_planned_file_is_overwritten(self):
        elsewhere = self.tmp_path / "elsewhere"
        elsewhere.mkdir()
        target = elsewhere / "favicon.ico"
        target.write_bytes(b"old")
        self.output_dir.mkdir()
        os.symlink(target, self.output_dir / "favicon.ico")

        run(self.settings(overwrite=True), engine=FakeEngine(), prompt=MagicMock())

        link = self.output_dir / "favicon.ico"
        self.assertFalse(link.is_symlink())
        self.assertEqual(link.read_bytes(), b"ICO:48,32,16")
        self.assertEqual(target.read_bytes(), b"old")

    def test_symlinked_planned_file_asks_before_overwrite(self):
        target = self.tmp_path / "other.png"
        target.write_bytes(b"old")
        self.output_dir.mkdir()
        os.symlink(target, self.output_dir / "favicon-16.png")

        with self.assertRaises(UserAbort):
            run(self.settings(), engine=FakeEngine(), prompt=FixedPrompt(PromptAnswer.ABORT))

    def test_unreadable_output_path_is_an_io_error(self):
        output_dir = self.tmp_path / ("x" * 300)

        with self.assertRaises(IoError) as ctx:
            check_output_dir(planner.build_plan(output_dir, "/", False, False))

        self.assertEqual(ctx.exception.path, output_dir)

    def test_planned_file_stat_failure_is_an_io_error(self):
        self.output_dir.mkdir()
        real_stat = Path.stat

        def stat(path, *args, **kwargs):
            if path.name == "favicon.ico":
                raise PermissionError(13, "Permission denied")
            return real_stat(path, *args, **kwargs)

        with patch.object(Path, 'stat', autospec=True, side_effect=stat):
            with self.assertRaises(IoError) as ctx:
                check_output_dir(planner.build_plan(self.output_dir, "/", False, False))

        self.assertEqual(ctx.exception.path, self.output_dir / "favicon.ico")
        self.assertIn("Permission denied", str(ctx.exception))

    def test_declined_overwrite_leaves_files_untouched(self):
        self.output_dir.mkdir()
        (self.output_dir / "favicon-16.png").write_bytes(b"keep me")
        engine = FakeEngine()

        with self.assertRaises(UserAbort):
            run(self.settings(), engine=engine, prompt=FixedPrompt(PromptAnswer.ABORT))

        self.assertEqual(engine.render_calls, [])
        self.assertEqual(os.listdir(self.output_dir), ["favicon-16.png"])
        self.assertEqual((self.output_dir / "favicon-16.png").read_bytes(), b"keep me")

    def test_accepted_overwrite_replaces_files(self):
        self.output_dir.mkdir()
        (self.output_dir / "favicon-16.png").write_bytes(b"old")
        prompt = MagicMock(return_value=PromptAnswer.PROCEED)

        run(self.settings(), engine=FakeEngine(), prompt=prompt)

        prompt.assert_called_once()
        self.assertNotEqual((self.output_dir / "favicon-16.png").read_bytes(), b"old")

    def test_overwrite_flag_skips_prompt(self):
        self.output_dir.mkdir()
        (self.output_dir / "manifest.json").write_text("{}")
        prompt = MagicMock(return_value=PromptAnswer.ABORT)

        run(self.settings(overwrite=True), engine=FakeEngine(), prompt=prompt)

        prompt.assert_not_called()

    def test_no_prompt_when_no_planned_file_exists(self):
        self.output_dir.mkdir()
        (self.output_dir / "unrelated.txt").write_text("hello")
        prompt = MagicMock(return_value=PromptAnswer.ABORT)

        run(self.settings(), engine=FakeEngine(), prompt=prompt)

        prompt.assert_not_called()
        self.assertEqual((self.output_dir / "unrelated.txt").read_text(), "hello")

    def test_rerun_with_overwrite_is_idempotent(self):
        run(self.settings(), engine=FakeEngine(), prompt=MagicMock())
        first = {p.name: p.read_bytes() for p in self.output_dir.iterdir()}

        run(self.settings(overwrite=True), engine=FakeEngine(), prompt=MagicMock())
        second = {p.name: p.read_bytes() for p in self.output_dir.iterdir()}

        self.assertEqual(first, second)

    def test_missing_input(self):
        with self.assertRaises(InputError):
            run(self.settings(input_path=self.tmp_path / "nope.png"), engine=FakeEngine(), prompt=MagicMock())
        self.assertFalse(self.output_dir.exists())

    def test_decode_failure_writes_nothing(self):
        bad = self.tmp_path / "bad.png"
        bad.write_bytes(b"BAD")
        with self.assertRaises(DecodeError):
            run(self.settings(input_path=bad), engine=FakeEngine(), prompt=MagicMock())
        self.assertFalse(self.output_dir.exists())

    def test_render_failure_aborts_run(self):
        with self.assertRaises(RenderError) as ctx:
            run(self.settings(workers=1), engine=FakeEngine(fail_on_size=95), prompt=MagicMock())
        self.assertEqual(ctx.exception.path, self.output_dir / "favicon-95.png")
        # Files written before the failure are kept
        self.assertTrue((self.output_dir / "manifest.json").is_file())
        self.assertTrue((self.output_dir / "favicon.ico").is_file())

    @patch('favicon_generator.orchestrator.PillowEngine')
    def test_default_engine_is_pillow(self, mock_engine_cls):
        mock_engine_cls.return_value = FakeEngine()
        run(self.settings(), prompt=MagicMock())
        mock_engine_cls.assert_called_once_with()


if __name__ == '__main__':
    unittest.main()
