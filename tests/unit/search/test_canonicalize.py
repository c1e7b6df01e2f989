"""Unit tests for filename canonicalization."""

import pytest

from catalog_search.search.canonicalize import NOISE_TOKENS, canonicalize_filename, product_code_variants


@pytest.mark.unit
@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("My.Scene_1080p.h264.mp4", "My Scene"),
        ("Sunset-Walk+Part_Two.mkv", "Sunset Walk Part Two"),
        ("Beach   Day.mp4", "Beach Day"),
        ("Jane.s.Day.mp4", "Jane's Day"),
        ("Weekend_8K_180x180_3dh_LR.mp4", "Weekend"),
        ("Studio Scene 2160P HEVC.mp4", "Studio Scene"),
        ("", ""),
    ],
)
def test_canonicalize_strips_noise(filename, expected):
    assert canonicalize_filename(filename) == expected


@pytest.mark.unit
def test_canonicalize_adds_product_code_variants():
    assert canonicalize_filename("PXVR.258_8K_h265.mp4") == "PXVR 258 PXVR00258 PXVR258"


@pytest.mark.unit
def test_canonicalize_adds_variants_for_every_code():
    result = canonicalize_filename("SAVR-883 and PXVR-12.mp4")

    assert result.startswith("SAVR 883 and PXVR 12")
    for variant in ("SAVR00883", "SAVR883", "PXVR00012", "PXVR12"):
        assert variant in result.split(" ")


@pytest.mark.unit
def test_canonicalize_does_not_duplicate_existing_spelling():
    result = canonicalize_filename("PXVR 258 PXVR258.mp4")

    assert result.split(" ").count("PXVR258") == 1
    assert "PXVR00258" in result


@pytest.mark.unit
def test_canonicalize_keeps_dots_in_directories():
    assert canonicalize_filename("clips.dir/My_Scene") == "clips dir/My Scene"


@pytest.mark.unit
def test_canonicalize_noise_tokens_are_case_insensitive():
    assert canonicalize_filename("Scene OCULUS5K Mono.mp4") == "Scene"


@pytest.mark.unit
def test_noise_token_list_contains_device_and_codec_markers():
    assert {"oculus", "h264", "vp9", "funscript", "fb360"} <= NOISE_TOKENS


@pytest.mark.unit
def test_product_code_variants_pads_to_five_digits():
    assert product_code_variants("ABC 7") == ["ABC00007", "ABC7"]
    assert product_code_variants("no codes here") == []
