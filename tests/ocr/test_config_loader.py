"""Unit tests for OCR configuration loader."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.ocr.config_loader import (
    CAPTCHA_LAYOUT,
    DROP_LAYOUT,
    Config,
    CropRegion,
    OCREngineConfig,
    OCRModuleConfig,
    PipelineLayout,
    get_default_config,
    load_config,
)
from src.ocr.types import FieldKind


class TestOCREngineConfig:
    """Test OCREngineConfig model."""

    def test_default_values(self):
        """Test default engine configuration."""
        config = OCREngineConfig()
        assert config.lang == "eng"
        assert config.psm == 7
        assert config.dpi == 70
        assert config.numeric_whitelist == "0123456789"
        assert "|" in config.text_blacklist
        assert config.tesseract_cmd is None

    def test_invalid_psm(self):
        """Test validation error for unknown page segmentation mode."""
        with pytest.raises(ValidationError):
            OCREngineConfig(psm=14)

    def test_invalid_dpi(self):
        """Test validation error for non-positive DPI."""
        with pytest.raises(ValidationError):
            OCREngineConfig(dpi=0)


class TestCropRegion:
    """Test CropRegion model."""

    def test_default_field_kind(self):
        """Test regions hold text unless stated otherwise."""
        region = CropRegion(x=1, y=2, width=3, height=4)
        assert region.field_kind == FieldKind.TEXT

    def test_field_kind_from_string(self):
        """Test field kind parses from its YAML value."""
        region = CropRegion(x=0, y=0, width=10, height=10, field_kind="numeric_id")
        assert region.field_kind == FieldKind.NUMERIC_ID

    def test_negative_origin(self):
        """Test validation error for negative coordinates."""
        with pytest.raises(ValidationError):
            CropRegion(x=-1, y=0, width=10, height=10)

    def test_zero_size(self):
        """Test validation error for empty rectangles."""
        with pytest.raises(ValidationError):
            CropRegion(x=0, y=0, width=0, height=10)

    def test_frozen(self):
        """Test regions are immutable."""
        region = CropRegion(x=0, y=0, width=10, height=10)
        with pytest.raises(ValidationError):
            region.x = 5


class TestPipelineLayout:
    """Test PipelineLayout validation."""

    def test_pool_covers_regions(self):
        """Test layout with one worker per region is valid."""
        layout = PipelineLayout(
            pool_size=2,
            regions=[CropRegion(x=0, y=0, width=5, height=5)] * 2,
        )
        assert layout.pool_size == 2

    def test_pool_larger_than_regions(self):
        """Test spare workers are allowed."""
        layout = PipelineLayout(
            pool_size=4, regions=[CropRegion(x=0, y=0, width=5, height=5)]
        )
        assert len(layout.regions) == 1

    def test_pool_smaller_than_regions(self):
        """Test validation error when regions outnumber workers."""
        with pytest.raises(ValidationError, match="pool_size"):
            PipelineLayout(
                pool_size=1,
                regions=[CropRegion(x=0, y=0, width=5, height=5)] * 2,
            )

    def test_default_layouts(self):
        """Test built-in captcha and drop layouts."""
        assert CAPTCHA_LAYOUT.pool_size == 3
        assert len(CAPTCHA_LAYOUT.regions) == 3
        assert CAPTCHA_LAYOUT.regions[2].field_kind == FieldKind.NUMERIC_ID

        assert DROP_LAYOUT.pool_size == 9
        assert len(DROP_LAYOUT.regions) == 9
        kinds = [r.field_kind for r in DROP_LAYOUT.regions]
        assert kinds == [FieldKind.TEXT] * 6 + [FieldKind.NUMERIC_ID] * 3


class TestLoadConfig:
    """Test YAML configuration loading."""

    def test_load_valid_config(self, tmp_path):
        """Test loading a valid YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "engine": {"dpi": 96},
                    "captcha": {
                        "pool_size": 3,
                        "regions": [
                            {"x": 0, "y": 0, "width": 10, "height": 10},
                            {"x": 0, "y": 10, "width": 10, "height": 10},
                            {"x": 0, "y": 20, "width": 10, "height": 10, "field_kind": "numeric_id"},
                        ],
                    },
                }
            )
        )

        config = load_config(config_file)

        assert isinstance(config, Config)
        assert config.ocr.engine.dpi == 96
        assert config.ocr.captcha.regions[1].y == 10
        # Unspecified sections keep their defaults
        assert config.ocr.drop == DROP_LAYOUT

    def test_missing_file(self):
        """Test error for a non-existent config file."""
        with pytest.raises(FileNotFoundError):
            load_config(Path("does/not/exist.yaml"))

    def test_invalid_layout(self, tmp_path):
        """Test validation error surfaces from YAML content."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump(
                {"drop": {"pool_size": 1, "regions": [{"x": 0, "y": 0, "width": 1, "height": 1}] * 3}}
            )
        )
        with pytest.raises(ValidationError):
            load_config(config_file)

    def test_empty_file(self, tmp_path):
        """Test an empty YAML file yields defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        assert load_config(config_file).ocr == OCRModuleConfig()

    def test_bundled_defaults_match_constants(self):
        """Test the bundled config.yaml matches the built-in layouts."""
        config = get_default_config()
        assert config.ocr.captcha == CAPTCHA_LAYOUT
        assert config.ocr.drop == DROP_LAYOUT
        assert config.ocr.engine == OCREngineConfig()
