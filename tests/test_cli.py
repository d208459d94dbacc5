"""
Tests for CLI-specific functionality including batch processing.

This module tests the command-line interface functionality including:
- Batch processing (process_batch function)
- Batch summary generation (generate_batch_summary function)
- Image file detection (is_image_file function)
- CLI argument validation
"""

import unittest
import sys
import os
import tempfile
import shutil
from pathlib import Path
from datetime import datetime, timedelta
from unittest import mock

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from silhouette_to_mesh.cli import (
    is_image_file,
    default_output_path,
    process_batch,
    generate_batch_summary,
    build_parser,
    main,
    _resolve_output_format,
)
from silhouette_to_mesh.config import ExtrusionConfig
from tests.helpers import create_photo_image


class TestIsImageFile(unittest.TestCase):
    """Test the is_image_file function."""

    def test_common_formats(self):
        for name in ("a.png", "a.jpg", "a.jpeg", "a.gif", "a.bmp", "a.webp"):
            with self.subTest(name=name):
                self.assertTrue(is_image_file(Path(name)))

    def test_uppercase_extension(self):
        self.assertTrue(is_image_file(Path("photo.PNG")))
        self.assertTrue(is_image_file(Path("photo.JpEg")))

    def test_non_image_files(self):
        for name in ("notes.txt", "model.glb", "model.stl", "noext"):
            with self.subTest(name=name):
                self.assertFalse(is_image_file(Path(name)))


class TestDefaultOutputPath(unittest.TestCase):
    """Test the {input_name}_model.{format} naming."""

    def test_next_to_input(self):
        self.assertEqual(
            default_output_path(Path("photos/cookie.jpg"), "glb"),
            Path("photos/cookie_model.glb")
        )

    def test_other_format(self):
        self.assertEqual(default_output_path(Path("leaf.png"), "stl"), Path("leaf_model.stl"))


class TestBuildParser(unittest.TestCase):
    """Test argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["photo.png"])
        self.assertEqual(args.image_file, "photo.png")
        self.assertFalse(args.batch)
        self.assertFalse(args.validate)
        self.assertIsNone(args.output)
        self.assertIsNone(args.format)

    def test_options(self):
        args = build_parser().parse_args([
            "photo.png", "-o", "out.stl", "--thickness", "0.1",
            "--edge-divisions", "5", "--decimation", "8", "--validate", "-v"
        ])
        self.assertEqual(args.output, "out.stl")
        self.assertEqual(args.thickness, 0.1)
        self.assertEqual(args.edge_divisions, 5)
        self.assertEqual(args.decimation, 8)
        self.assertTrue(args.validate)
        self.assertTrue(args.verbose)

    def test_invalid_format_rejected(self):
        with mock.patch('sys.stderr'):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["photo.png", "--format", "fbx"])


class TestResolveOutputFormat(unittest.TestCase):
    """Test how the output format is picked from the arguments."""

    def resolve(self, argv):
        return _resolve_output_format(build_parser().parse_args(argv))

    def test_default(self):
        self.assertEqual(self.resolve(["photo.png"]), "glb")
        self.assertEqual(self.resolve(["photo.png", "-o", "model"]), "glb")

    def test_from_extension(self):
        self.assertEqual(self.resolve(["photo.png", "-o", "model.STL"]), "stl")
        self.assertEqual(self.resolve(["photo.png", "-o", "model.obj"]), "obj")

    def test_format_flag_wins(self):
        self.assertEqual(self.resolve(["photo.png", "-o", "model.glb", "--format", "stl"]), "stl")

    def test_unsupported_extension_rejected(self):
        with self.assertRaises(ValueError) as ctx:
            self.resolve(["photo.png", "-o", "model.ply"])
        self.assertIn("Unsupported output format 'ply'", str(ctx.exception))
        with self.assertRaises(ValueError):
            self.resolve(["photo.png", "-o", "model.ply", "--format", "glb"])


class TestGenerateBatchSummary(unittest.TestCase):
    """Test the Markdown batch summary."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_summary_contents(self):
        results = {
            'success': [{
                'input_file': 'cookie.png',
                'output_file': 'cookie_model.glb',
                'num_outline_points': 12,
                'num_vertices': 48,
                'num_triangles': 92,
                'file_size': '10.5 KB'
            }],
            'failed': [{
                'input_file': 'blank.png',
                'error': 'No piece found'
            }]
        }
        start = datetime(2024, 1, 2, 3, 4, 5)
        end = start + timedelta(seconds=2.5)

        summary_path = generate_batch_summary(results, Path(self.temp_dir), start, end)

        self.assertTrue(summary_path.endswith("batch_summary_20240102030405.md"))
        content = Path(summary_path).read_text(encoding='utf-8')
        self.assertIn("# Batch Conversion Summary", content)
        self.assertIn("**Duration:** 2.5 seconds", content)
        self.assertIn("**Successful:** 1 files", content)
        self.assertIn("**Failed:** 1 files", content)
        self.assertIn("| cookie.png | cookie_model.glb | 12 | 48 | 92 | 10.5 KB |", content)
        self.assertIn("### blank.png", content)
        self.assertIn("**Error:** No piece found", content)

    def test_summary_without_failures(self):
        results = {'success': [], 'failed': []}
        now = datetime.now()
        summary_path = generate_batch_summary(results, Path(self.temp_dir), now, now)
        content = Path(summary_path).read_text(encoding='utf-8')
        self.assertNotIn("Failed Files", content)
        self.assertNotIn("Successful Conversions", content)


class TestProcessBatch(unittest.TestCase):
    """Test batch processing of a folder."""

    def setUp(self):
        self.input_dir = Path(tempfile.mkdtemp())
        self.output_dir = Path(tempfile.mkdtemp()) / "out"
        self.config = ExtrusionConfig(decimation_step=8, texture_size_px=64)

    def tearDown(self):
        shutil.rmtree(self.input_dir, ignore_errors=True)
        shutil.rmtree(self.output_dir.parent, ignore_errors=True)

    def test_mixed_folder(self):
        create_photo_image(filepath=str(self.input_dir / "disc.png"))
        create_photo_image(circle=None, filepath=str(self.input_dir / "blank.png"))
        (self.input_dir / "notes.txt").write_text("not an image")

        results = process_batch(self.input_dir, self.output_dir, self.config)

        self.assertEqual(len(results['success']), 1)
        self.assertEqual(len(results['failed']), 1)
        self.assertEqual(results['success'][0]['input_file'], "disc.png")
        self.assertEqual(results['success'][0]['output_file'], "disc_model.glb")
        self.assertEqual(results['failed'][0]['input_file'], "blank.png")
        self.assertTrue((self.output_dir / "disc_model.glb").exists())
        self.assertFalse((self.output_dir / "blank_model.glb").exists())

    def test_empty_folder(self):
        results = process_batch(self.input_dir, self.output_dir, self.config)
        self.assertEqual(results, {'success': [], 'failed': []})
        self.assertTrue(self.output_dir.exists())

    def test_recurse_keeps_structure(self):
        sub = self.input_dir / "shelf"
        sub.mkdir()
        create_photo_image(filepath=str(sub / "disc.png"))

        flat = process_batch(self.input_dir, self.output_dir, self.config)
        self.assertEqual(flat, {'success': [], 'failed': []})

        results = process_batch(self.input_dir, self.output_dir, self.config, recurse=True)
        self.assertEqual(len(results['success']), 1)
        self.assertEqual(results['success'][0]['input_file'], str(Path("shelf") / "disc.png"))
        self.assertTrue((self.output_dir / "shelf" / "disc_model.glb").exists())

    def test_stl_batch(self):
        create_photo_image(filepath=str(self.input_dir / "disc.png"))
        config = ExtrusionConfig(decimation_step=8, output_format="stl")
        results = process_batch(self.input_dir, self.output_dir, config)
        self.assertEqual(results['success'][0]['output_file'], "disc_model.stl")


class TestMain(unittest.TestCase):
    """Test the CLI entry point end to end."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def run_main(self, argv):
        with mock.patch.object(sys, 'argv', ['silhouette-to-mesh'] + argv):
            main()

    def test_single_file(self):
        input_path = create_photo_image(filepath=str(self.temp_dir / "disc.png"))
        self.run_main([input_path, "--decimation", "8", "--texture-size", "64"])
        self.assertTrue((self.temp_dir / "disc_model.glb").exists())

    def test_single_file_format_from_output(self):
        input_path = create_photo_image(filepath=str(self.temp_dir / "disc.png"))
        output_path = str(self.temp_dir / "custom.stl")
        self.run_main([input_path, "-o", output_path, "--decimation", "8"])
        self.assertTrue(os.path.exists(output_path))

    def test_unsupported_output_extension_exits(self):
        """-o model.ply must not quietly write glb data into a .ply file."""
        input_path = create_photo_image(filepath=str(self.temp_dir / "disc.png"))
        output_path = self.temp_dir / "model.ply"
        with self.assertRaises(SystemExit) as ctx:
            self.run_main([input_path, "-o", str(output_path), "--decimation", "8"])
        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse(output_path.exists())
        self.assertEqual(list(self.temp_dir.glob("*.glb")), [])

    def test_missing_file_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_main([str(self.temp_dir / "nope.png")])
        self.assertEqual(ctx.exception.code, 1)

    def test_no_piece_exits(self):
        input_path = create_photo_image(circle=None, filepath=str(self.temp_dir / "blank.png"))
        with self.assertRaises(SystemExit) as ctx:
            self.run_main([input_path])
        self.assertEqual(ctx.exception.code, 1)

    def test_invalid_config_exits(self):
        input_path = create_photo_image(filepath=str(self.temp_dir / "disc.png"))
        with self.assertRaises(SystemExit) as ctx:
            self.run_main([input_path, "--thickness", "-1"])
        self.assertEqual(ctx.exception.code, 1)

    def test_no_arguments_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_main([])
        self.assertEqual(ctx.exception.code, 1)

    def test_batch_with_image_file_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_main(["photo.png", "--batch"])
        self.assertEqual(ctx.exception.code, 1)

    def test_batch_missing_folder_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_main(["--batch", "--batch-input", str(self.temp_dir / "missing")])
        self.assertEqual(ctx.exception.code, 1)

    def test_batch_mode(self):
        input_dir = self.temp_dir / "in"
        output_dir = self.temp_dir / "out"
        input_dir.mkdir()
        create_photo_image(filepath=str(input_dir / "disc.png"))

        self.run_main([
            "--batch", "--batch-input", str(input_dir), "--batch-output", str(output_dir),
            "--decimation", "8", "--texture-size", "64"
        ])
        self.assertTrue((output_dir / "disc_model.glb").exists())
        self.assertEqual(len(list(output_dir.glob("batch_summary_*.md"))), 1)


if __name__ == '__main__':
    unittest.main()
