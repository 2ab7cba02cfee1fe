import numpy as np
from PIL import Image

from colormark.services.watermarking import cli_embed, cli_extract


def _save(path, arr):
    Image.fromarray(arr).save(path)
    return str(path)


def _host(size=512):
    x = np.linspace(70, 170, size)
    X, Y = np.meshgrid(x, x)
    return np.round(np.stack([X, Y, 240 - X], axis=-1)).astype(np.uint8)


def _watermark(size=128):
    rng = np.random.default_rng(21)
    return (rng.integers(0, 2, size=(size, size, 3)) * 255).astype(np.uint8)


def test_embed_then_extract_with_reference(tmp_path, capsys):
    host = _save(tmp_path / "host.png", _host())
    wm = _save(tmp_path / "wm.png", _watermark())
    marked = tmp_path / "marked.png"
    recovered = tmp_path / "recovered.png"

    assert cli_embed.main([
        "--host", host, "--watermark", wm, "--out", str(marked),
        "--key", "777", "--step", "50",
    ]) == 0
    assert marked.exists()

    assert cli_extract.main([
        "--in", str(marked), "--out", str(recovered),
        "--key", "777", "--step", "50", "--reference", wm,
    ]) == 0
    out = capsys.readouterr().out
    assert "Watermarked saved" in out
    assert "identical samples: 100.00%" in out
    assert np.array_equal(np.array(Image.open(recovered).convert("RGB")), _watermark())


def test_extract_without_reference(tmp_path, capsys):
    host = _save(tmp_path / "host.png", _host())
    wm = _save(tmp_path / "wm.png", _watermark())
    marked = tmp_path / "marked.png"
    cli_embed.main([
        "--host", host, "--watermark", wm, "--out", str(marked),
        "--key", "5", "--color-space", "luma",
    ])
    assert cli_extract.main([
        "--in", str(marked), "--out", str(tmp_path / "r.png"),
        "--key", "5", "--color-space", "luma",
    ]) == 0
    assert "No reference provided" in capsys.readouterr().out


def test_wrong_host_size_exits_with_error(tmp_path):
    host = _save(tmp_path / "small.png", _host(256))
    wm = _save(tmp_path / "wm.png", _watermark())
    out = tmp_path / "marked.png"

    code = cli_embed.main([
        "--host", host, "--watermark", wm, "--out", str(out), "--key", "1",
    ])
    assert code == 1
    assert not out.exists()


def test_missing_input_exits_with_error(tmp_path):
    code = cli_extract.main([
        "--in", str(tmp_path / "nope.png"), "--out", str(tmp_path / "r.png"), "--key", "1",
    ])
    assert code == 1


def test_reference_is_compared_at_alphabet_levels(tmp_path, capsys):
    # smooth logo: only its thresholded version fits a binary alphabet
    ramp = np.linspace(0, 255, 128)
    X, Y = np.meshgrid(ramp, ramp)
    logo = np.round(np.stack([X, Y, 255 - X], axis=-1))
    wm = _save(tmp_path / "logo.png", logo.astype(np.uint8))
    host = _save(tmp_path / "host.png", _host())
    marked = tmp_path / "marked.png"

    assert cli_embed.main(["--host", host, "--watermark", wm, "--out", str(marked), "--key", "9"]) == 0
    assert cli_extract.main([
        "--in", str(marked), "--out", str(tmp_path / "r.png"), "--key", "9", "--reference", wm,
    ]) == 0
    assert "MAE vs reference: 0.00, identical samples: 100.00%" in capsys.readouterr().out
