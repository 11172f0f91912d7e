"""
Tests for writing sprite sheets and descriptors to disk.
"""

import asyncio
import logging
import plistlib

import cv2
import numpy as np
import pytest

from texture_packer.encoders import CocosEncoder, EncodeMultipleResult, NoneEncoder, SpineAtlasEncoder
from texture_packer.errors import TexturePackerError, WriteError
from texture_packer.models import MetaOverrides
from texture_packer.packer import TexturePacker

# Three 20x20 sprites in 32x32 sheets without border always need three sheets
MULTI_SHEET_OPTIONS = dict(max_width=32, max_height=32, padding=0, border=0, pot=False)


@pytest.fixture
def single_sheet_packer(make_sprite, png_bytes):
    packer = TexturePacker()
    packer.add("hero", png_bytes(make_sprite(10, 12, border=(2, 0, 0, 2))))
    packer.add("coin", png_bytes(make_sprite(6, 6)))
    asyncio.run(packer.generate())
    return packer


@pytest.fixture
def multi_sheet_packer(make_sprite, png_bytes):
    packer = TexturePacker()
    for name in ("a", "b", "c"):
        packer.add(name, png_bytes(make_sprite(20, 20)))
    asyncio.run(packer.generate(**MULTI_SHEET_OPTIONS))
    assert packer.sprite_sheet_count == 3
    return packer


class TwoBufferEncoder:
    """Returns two descriptors no matter how many sheets there are."""

    def encode(self, info):
        return None

    def encode_multiple(self, infos):
        return EncodeMultipleResult(extension=".txt", buffers=(b"one", b"two"))


def test_write_cocos(single_sheet_packer, tmp_path):
    """write() saves a plist and the sheet image for the first sheet."""
    out = tmp_path / "out"
    paths = asyncio.run(single_sheet_packer.write(CocosEncoder(), out, "atlas"))

    assert paths == [out / "atlas.plist", out / "atlas.png"]
    for path in paths:
        assert path.exists()

    with open(out / "atlas.plist", "rb") as f:
        descriptor = plistlib.load(f)
    assert set(descriptor["frames"]) == {"hero", "coin"}
    assert descriptor["metadata"]["textureFileName"] == "atlas.png"
    assert descriptor["metadata"]["pixelFormat"] == "RGBA8888"
    assert descriptor["metadata"]["format"] == 3
    assert descriptor["metadata"]["premultiplyAlpha"] is False

    hero = descriptor["frames"]["hero"]
    assert hero["spriteSize"] == "{10,12}"
    assert hero["spriteSourceSize"] == "{12,14}"
    assert hero["spriteOffset"] == "{-1,-1}"

    texture = cv2.imread(str(out / "atlas.png"), cv2.IMREAD_UNCHANGED)
    meta = single_sheet_packer.packages[0].sheet_meta
    assert texture.shape == (meta.size[1], meta.size[0], 4)


def test_write_none_encoder(single_sheet_packer, tmp_path):
    """Texture-only output writes no descriptor."""
    paths = asyncio.run(single_sheet_packer.write(NoneEncoder(), tmp_path, "atlas"))
    assert paths == [tmp_path / "atlas.png"]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["atlas.png"]


def test_write_overrides(single_sheet_packer, tmp_path):
    """Overrides change declared values but the image is still saved as PNG."""
    overrides = MetaOverrides(texture_extension=".pvr", pixel_format="RGBA4444")
    paths = asyncio.run(single_sheet_packer.write(CocosEncoder(), tmp_path, "atlas", overrides))

    assert paths[1] == tmp_path / "atlas.png"
    with open(paths[0], "rb") as f:
        metadata = plistlib.load(f)["metadata"]
    assert metadata["textureFileName"] == "atlas.pvr"
    assert metadata["pixelFormat"] == "RGBA4444"


def test_write_before_generate(tmp_path):
    with pytest.raises(TexturePackerError, match="generate"):
        asyncio.run(TexturePacker().write(CocosEncoder(), tmp_path, "atlas"))


def test_write_only_uses_first_sheet(multi_sheet_packer, tmp_path):
    paths = asyncio.run(multi_sheet_packer.write(NoneEncoder(), tmp_path, "atlas"))
    assert paths == [tmp_path / "atlas.png"]


def test_write_multiple_per_sheet_descriptors(multi_sheet_packer, tmp_path):
    """One plist per sheet, named like the sheet."""
    paths = asyncio.run(multi_sheet_packer.write_multiple(CocosEncoder(), tmp_path, "atlas"))

    expected = [f"atlas-{i}.plist" for i in range(3)] + [f"atlas-{i}.png" for i in range(3)]
    assert [p.name for p in paths] == expected
    for path in paths:
        assert path.exists()

    frames = set()
    for i, package in enumerate(multi_sheet_packer.packages):
        with open(tmp_path / f"atlas-{i}.plist", "rb") as f:
            descriptor = plistlib.load(f)
        assert descriptor["metadata"]["textureFileName"] == f"atlas-{i}.png"
        assert list(descriptor["frames"]) == package.sprite_names
        frames.update(descriptor["frames"])
    assert frames == {"a", "b", "c"}


def test_write_multiple_custom_file_names(multi_sheet_packer, tmp_path):
    paths = asyncio.run(multi_sheet_packer.write_multiple(
        NoneEncoder(), tmp_path, "atlas", lambda base, i: f"{base}_page{i + 1}"))
    assert [p.name for p in paths] == ["atlas_page1.png", "atlas_page2.png", "atlas_page3.png"]


def test_write_multiple_shared_descriptor(multi_sheet_packer, tmp_path):
    """A single descriptor buffer is saved once, named after the base name."""
    paths = asyncio.run(multi_sheet_packer.write_multiple(SpineAtlasEncoder(), tmp_path, "atlas"))

    assert [p.name for p in paths] == ["atlas.atlas", "atlas-0.png", "atlas-1.png", "atlas-2.png"]
    atlas = (tmp_path / "atlas.atlas").read_text()
    for i in range(3):
        assert f"atlas-{i}.png" in atlas


def test_write_multiple_mismatched_descriptor_count(multi_sheet_packer, tmp_path, caplog):
    """Descriptor lists matching neither 1 nor the sheet count are not written."""
    with caplog.at_level(logging.WARNING, logger="texture_packer.writer"):
        paths = asyncio.run(multi_sheet_packer.write_multiple(TwoBufferEncoder(), tmp_path, "atlas"))

    assert [p.name for p in paths] == ["atlas-0.png", "atlas-1.png", "atlas-2.png"]
    assert not list(tmp_path.glob("*.txt"))
    assert "2 descriptor(s) for 3 sheet(s)" in caplog.text


def test_write_failure_is_reported(single_sheet_packer, tmp_path):
    """A filesystem error surfaces as WriteError."""
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied")
    with pytest.raises(WriteError):
        asyncio.run(single_sheet_packer.write(CocosEncoder(), blocker, "atlas"))


def test_write_multiple_failure_is_reported(multi_sheet_packer, tmp_path):
    """One blocked sheet file fails the whole write_multiple() call with WriteError."""
    (tmp_path / "atlas-1.png").mkdir()
    with pytest.raises(WriteError, match="atlas-1.png"):
        asyncio.run(multi_sheet_packer.write_multiple(CocosEncoder(), tmp_path, "atlas"))


def test_write_empty_texture_extension(single_sheet_packer, tmp_path):
    """An explicitly empty texture extension is kept, not replaced by the default."""
    paths = asyncio.run(single_sheet_packer.write(
        CocosEncoder(), tmp_path, "atlas", MetaOverrides(texture_extension="")))

    with open(paths[0], "rb") as f:
        metadata = plistlib.load(f)["metadata"]
    assert metadata["textureFileName"] == "atlas"
    assert paths[1] == tmp_path / "atlas.png"


def _spine_region(atlas_text, name):
    """Parse the entries of one region block of a Spine atlas."""
    lines = atlas_text.splitlines()
    start = lines.index(name) + 1
    entries = {}
    for line in lines[start:]:
        if not line.startswith("  "):
            break
        key, value = line.strip().split(": ", 1)
        entries[key] = value
    return entries


def test_spine_rotated_region_rebuilds_source(gradient_sprite, png_bytes, tmp_path):
    """Undoing the atlas rotation on the sheet pixels yields the original sprite."""
    source = gradient_sprite(10, 40)
    packer = TexturePacker()
    packer.add("tall", png_bytes(source))
    asyncio.run(packer.generate(max_width=64, max_height=32, padding=0, border=0, pot=False))
    assert packer.sprite_meta("tall").rotated

    asyncio.run(packer.write(SpineAtlasEncoder(), tmp_path, "atlas"))
    region = _spine_region((tmp_path / "atlas.atlas").read_text(), "tall")
    sheet = cv2.imread(str(tmp_path / "atlas.png"), cv2.IMREAD_UNCHANGED)

    # Spine: "rotate" is true (90) or the counter-clockwise angle of the stored region
    rotate = region["rotate"]
    degrees = {"false": 0, "true": 90}.get(rotate)
    if degrees is None:
        degrees = int(rotate)
    x, y = (int(v) for v in region["xy"].split(","))
    w, h = (int(v) for v in region["size"].split(","))
    if degrees in (90, 270):
        w, h = h, w

    stored = sheet[y:y + h, x:x + w]
    np.testing.assert_array_equal(np.rot90(stored, k=-(degrees // 90)), source)
