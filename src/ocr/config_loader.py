"""Configuration loader with Pydantic validation for OCR module.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values. Pool sizing and region
layout live in one ``PipelineLayout`` so they cannot drift apart.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .types import FieldKind


class OCREngineConfig(BaseModel):
    """Tesseract engine configuration.

    Attributes:
        lang: Tesseract language pack
        psm: Page segmentation mode (7 = single text line)
        dpi: Source resolution hint matching the captured UI scale
        text_blacklist: Characters never emitted for TEXT regions
        numeric_whitelist: Only characters emitted for NUMERIC_ID regions
        tesseract_cmd: Optional path to the tesseract binary
    """

    lang: str = "eng"
    psm: int = Field(default=7, ge=0, le=13)
    dpi: int = Field(default=70, gt=0)
    text_blacklist: str = "|[]*ç€"
    numeric_whitelist: str = "0123456789"
    tesseract_cmd: Optional[str] = None


class CropRegion(BaseModel):
    """Fixed pixel rectangle known to contain one text field.

    Attributes:
        x: Left edge in pixels
        y: Top edge in pixels
        width: Rectangle width in pixels
        height: Rectangle height in pixels
        field_kind: Whether the field is free text or a numeric id
    """

    model_config = ConfigDict(frozen=True)

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    field_kind: FieldKind = FieldKind.TEXT


class PipelineLayout(BaseModel):
    """Region layout and worker pool size of one pipeline variant.

    Attributes:
        pool_size: Number of OCR engine instances (one per region slot)
        regions: Crop regions, region ``i`` handled by instance ``i``
    """

    pool_size: int = Field(gt=0)
    regions: List[CropRegion]

    @model_validator(mode="after")
    def _pool_covers_regions(self) -> "PipelineLayout":
        if self.pool_size < len(self.regions):
            raise ValueError(
                f"pool_size ({self.pool_size}) must be >= number of regions "
                f"({len(self.regions)})"
            )
        return self


def _text(x: int, y: int, width: int = 290, height: int = 26) -> CropRegion:
    return CropRegion(x=x, y=y, width=width, height=height)


def _numeric(x: int, y: int, width: int = 108, height: int = 26) -> CropRegion:
    return CropRegion(
        x=x, y=y, width=width, height=height, field_kind=FieldKind.NUMERIC_ID
    )


# Name, series, generation
CAPTCHA_LAYOUT = PipelineLayout(
    pool_size=3,
    regions=[
        _text(18, 460, height=27),
        _text(18, 488, height=27),
        _numeric(41, 430, height=27),
    ],
)

# Name/series pairs for cards 1-3, then the three generation fields
DROP_LAYOUT = PipelineLayout(
    pool_size=9,
    regions=[
        _text(12, 458),
        _text(12, 487),
        _text(361, 458),
        _text(361, 487),
        _text(704, 458),
        _text(704, 487),
        _numeric(36, 427),
        _numeric(385, 427),
        _numeric(728, 427),
    ],
)


class OCRModuleConfig(BaseModel):
    """Complete OCR module configuration.

    Attributes:
        engine: Tesseract engine configuration shared by every pool slot
        captcha: Layout of the single-card captcha screen
        drop: Layout of the three-card drop screen
    """

    engine: OCREngineConfig = OCREngineConfig()
    captcha: PipelineLayout = CAPTCHA_LAYOUT
    drop: PipelineLayout = DROP_LAYOUT


class Config(BaseModel):
    """Root configuration container.

    Attributes:
        ocr: OCR module configuration
    """

    ocr: OCRModuleConfig = OCRModuleConfig()


def load_config(config_path: Path) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated Config object with all settings

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config(Path("src/ocr/config.yaml"))
        >>> print(config.ocr.drop.pool_size)
        9
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    # Wrap flat YAML structure in 'ocr' key for Config model
    return Config(ocr=OCRModuleConfig(**config_dict))


def get_default_config() -> Config:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config object loaded from src/ocr/config.yaml
    """
    default_config_path = Path(__file__).parent / "config.yaml"
    if default_config_path.exists():
        return load_config(default_config_path)
    else:
        return Config()
