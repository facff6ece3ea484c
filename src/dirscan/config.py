from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, TypedDict, cast

import yaml


class RawAppConfig(TypedDict):
    max_depth: int | None
    top_n: int
    output_format: str


class RawConfigFile(TypedDict):
    config: RawAppConfig


CONFIG_FILENAME: Path = Path("dirscan.yaml")
OUTPUT_FORMATS: tuple[str, ...] = ("text", "yaml")


def type_error(key: str, value: object) -> NoReturn:
    raise TypeError(f"Unexpected value of wrong type for {key}: {value!r}")


def _optional_int(raw: dict[str, object], key: str, default: int | None) -> int | None:
    value: object = raw.get(key, default)
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        type_error(key, value)
    if value < 0:
        raise ValueError(f"{key} must be >= 0, got {value}")
    return value


@dataclass(slots=True)
class AppConfig:
    max_depth: int | None = None
    top_n: int = 10
    output_format: str = "text"

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.top_n < 0:
            raise ValueError(f"top_n must be >= 0, got {self.top_n}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {self.output_format!r}")

    @staticmethod
    def load(path: Path = CONFIG_FILENAME) -> "AppConfig":
        if not path.exists():
            raise FileNotFoundError(f"Missing config file {path}. Run dirscan init first.")

        with path.open("r", encoding="UTF-8") as f:
            raw_loaded_obj: object | None = cast(object, yaml.safe_load(f))

        if not raw_loaded_obj:
            raise ValueError("Config file is empty or invalid YAML.")

        if not isinstance(raw_loaded_obj, dict):
            type_error("file", raw_loaded_obj)

        raw_dict: dict[str, object] = cast(dict[str, object], raw_loaded_obj)

        cfg_raw: object | None = raw_dict.get("config")
        if not isinstance(cfg_raw, dict):
            type_error("config", cfg_raw)

        cfg: dict[str, object] = cast(dict[str, object], cfg_raw)

        output_format: object = cfg.get("output_format", "text")
        if not isinstance(output_format, str):
            type_error("output_format", output_format)

        top_n: int | None = _optional_int(cfg, "top_n", 10)
        if top_n is None:
            type_error("top_n", top_n)

        appConfig: AppConfig = AppConfig(
            max_depth=_optional_int(cfg, "max_depth", None),
            top_n=top_n,
            output_format=output_format,
        )

        return appConfig

    @staticmethod
    def load_or_default(path: Path | None = None) -> "AppConfig":
        """
        Load `path`, or the default config file when no path is given.

        A missing default file is not an error, a missing explicit one is.
        """
        if path is not None:
            return AppConfig.load(path)
        if CONFIG_FILENAME.exists():
            return AppConfig.load(CONFIG_FILENAME)
        return AppConfig()

    def save(self, path: Path = CONFIG_FILENAME) -> None:
        raw: RawConfigFile = {"config": self.to_raw()}
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(raw, f, sort_keys=False)

    def to_raw(self) -> RawAppConfig:
        return {
            "max_depth": self.max_depth,
            "top_n": self.top_n,
            "output_format": self.output_format,
        }
