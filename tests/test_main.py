"""
Tests for the console entry point
"""

import numpy as np
from PIL import Image

from core.image.codec import decode_image
from main import main


def _write_png(path, size=(20, 10)):
    image = np.zeros((size[1], size[0], 4), dtype=np.uint8)
    image[:, :, 0] = 200
    image[:, :, 3] = 255
    Image.fromarray(image).save(path, format="PNG")


class TestMain:
    """Test the batch CLI"""

    def test_rotate_writes_output(self, tmp_path):
        source = tmp_path / "sample.png"
        _write_png(source)

        assert main(["rotate", str(source), "--degrees", "90"]) == 0

        output = tmp_path / "sample_processed.png"
        assert output.exists()
        assert decode_image(output.read_bytes()).size == (10, 20)

    def test_resize_into_out_dir(self, tmp_path):
        source = tmp_path / "sample.png"
        _write_png(source)
        out_dir = tmp_path / "out"

        assert main(["resize", str(source), "--size", "5x4", "-o", str(out_dir)]) == 0
        assert decode_image((out_dir / "sample_processed.png").read_bytes()).size == (5, 4)

    def test_inpaint_with_brush(self, tmp_path):
        source = tmp_path / "sample.png"
        _write_png(source)

        assert main(["inpaint", str(source), "--brush", "10,5", "--brush-size", "5"]) == 0
        assert (tmp_path / "sample_processed.png").exists()

    def test_failed_image_sets_exit_code(self, tmp_path):
        source = tmp_path / "sample.png"
        _write_png(source)

        assert main(["crop", str(source), "--rect", "0,0,0,0"]) == 1

    def test_unsupported_file_is_skipped(self, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("not an image")

        assert main(["rotate", str(source)]) == 1

    def test_truncated_file_does_not_abort_batch(self, tmp_path):
        """Test a file that fails to decode is skipped and the others still run"""
        noise = np.random.default_rng(3).integers(0, 256, size=(200, 200, 4), dtype=np.uint8)
        full = tmp_path / "full.png"
        Image.fromarray(noise).save(full, format="PNG")
        broken = tmp_path / "broken.png"
        broken.write_bytes(full.read_bytes()[:2000])
        good = tmp_path / "good.png"
        _write_png(good, size=(40, 40))

        assert main(["rotate", str(broken), str(good)]) == 1

        assert (tmp_path / "good_processed.png").exists()
        assert not (tmp_path / "broken_processed.png").exists()

    def test_same_name_in_different_directories(self, tmp_path):
        first = tmp_path / "a" / "sample.png"
        second = tmp_path / "b" / "sample.png"
        for path, size in ((first, (20, 10)), (second, (30, 12))):
            path.parent.mkdir()
            _write_png(path, size=size)

        assert main(["rotate", str(first), str(second)]) == 0

        assert decode_image((tmp_path / "a" / "sample_processed.png").read_bytes()).size == (10, 20)
        assert decode_image((tmp_path / "b" / "sample_processed.png").read_bytes()).size == (12, 30)
