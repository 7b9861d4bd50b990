"""Integration tests for the command line interface."""

import pytest
from PIL import Image

from kpalette import main as cli


@pytest.fixture
def two_tone_image(tmp_path):
    """4x4 image: top half black, bottom half white."""
    image = Image.new("RGB", (4, 4), (0, 0, 0))
    for x in range(4):
        for y in range(2, 4):
            image.putpixel((x, y), (255, 255, 255))
    path = tmp_path / "input.png"
    image.save(path)
    return path


def run_cli(*argv):
    cli.main([str(a) for a in argv])


class TestPaletteOutput:
    def test_palette_to_stdout(self, two_tone_image, capsys):
        # one cluster per distinct color whatever the seed
        run_cli(two_tone_image, "-k", 1, "-n", 3, "-s", 1, "-q")
        assert capsys.readouterr().out == "#7f7f7f\n"

    def test_rgb_format(self, two_tone_image, capsys):
        run_cli(two_tone_image, "-k", 1, "-s", 1, "-f", "rgb", "-q")
        assert capsys.readouterr().out == "rgb(127, 127, 127)\n"

    def test_alpha_palette(self, two_tone_image, capsys):
        run_cli(two_tone_image, "-k", 1, "-s", 1, "--with-alpha", "-q")
        assert capsys.readouterr().out == "#7f7f7fff\n"

    def test_palette_count(self, two_tone_image, capsys):
        run_cli(two_tone_image, "-k", 3, "-s", 5, "-q")
        assert len(capsys.readouterr().out.splitlines()) == 3

    def test_palette_file(self, two_tone_image, tmp_path):
        output = tmp_path / "palette.txt"
        run_cli(two_tone_image, output, "-k", 1, "-s", 2, "-q")
        assert output.read_text() == "#7f7f7f\n"

    def test_same_seed_same_palette(self, two_tone_image, capsys):
        run_cli(two_tone_image, "-k", 2, "-s", 42, "-q")
        first = capsys.readouterr().out
        run_cli(two_tone_image, "-k", 2, "-s", 42, "-q", "-j", 3)
        assert capsys.readouterr().out == first


class TestImageOutput:
    def test_quantized_image(self, two_tone_image, tmp_path):
        output = tmp_path / "quantized.png"
        run_cli(two_tone_image, "-o", output, "-k", 1, "-s", 3, "-q")

        with Image.open(output) as image:
            assert image.size == (4, 4)
            pixels = {image.getpixel((x, y)) for x in range(4) for y in range(4)}
            assert pixels == {(127, 127, 127)}

    def test_quantized_image_with_alpha(self, two_tone_image, tmp_path):
        output = tmp_path / "quantized.png"
        run_cli(two_tone_image, output, "-k", 1, "-s", 3, "-a", "-q")

        with Image.open(output) as image:
            assert image.mode == "RGBA"


class TestArgumentErrors:
    def test_format_with_image_output(self, two_tone_image, tmp_path):
        with pytest.raises(SystemExit) as exc:
            run_cli(two_tone_image, tmp_path / "out.png", "-f", "hex")
        assert exc.value.code == 2

    def test_alpha_with_jpeg_output(self, two_tone_image, tmp_path):
        with pytest.raises(SystemExit) as exc:
            run_cli(two_tone_image, tmp_path / "out.jpg", "-a")
        assert exc.value.code == 2

    def test_two_outputs(self, two_tone_image, tmp_path):
        with pytest.raises(SystemExit) as exc:
            run_cli(two_tone_image, tmp_path / "a.txt", "-o", tmp_path / "b.txt")
        assert exc.value.code == 2

    def test_preview_with_output(self, two_tone_image, tmp_path):
        with pytest.raises(SystemExit) as exc:
            run_cli(two_tone_image, tmp_path / "a.txt", "--preview")
        assert exc.value.code == 2

    def test_invalid_color_count(self, two_tone_image):
        with pytest.raises(SystemExit) as exc:
            run_cli(two_tone_image, "-k", 0)
        assert exc.value.code == 2

    def test_unknown_format(self, two_tone_image):
        with pytest.raises(SystemExit) as exc:
            run_cli(two_tone_image, "-f", "hsl")
        assert exc.value.code == 2


class TestRuntimeErrors:
    def test_missing_input(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            run_cli(tmp_path / "missing.png")
        assert exc.value.code == 1

    def test_more_colors_than_pixels(self, two_tone_image):
        with pytest.raises(SystemExit) as exc:
            run_cli(two_tone_image, "-k", 17, "-q")
        assert exc.value.code == 1

    def test_unwritable_palette_file(self, two_tone_image, tmp_path):
        output = tmp_path / "missing-dir" / "palette.txt"
        with pytest.raises(SystemExit) as exc:
            run_cli(two_tone_image, output, "-k", 1, "-s", 1, "-q")
        assert exc.value.code == 1

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not an image")
        with pytest.raises(SystemExit) as exc:
            run_cli(path)
        assert exc.value.code == 1


def test_progress_disabled_when_not_a_terminal():
    assert isinstance(cli.make_observer(quiet=False), cli.NullProgress)
    assert isinstance(cli.make_observer(quiet=True), cli.NullProgress)
