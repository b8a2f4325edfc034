"""Router configuration models.

The configuration is loaded once and never mutated; live values are kept
separately by the binding store.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .target import Target, parse_targets

FEEDBACK_SUFFIX = "_FEEDBACKLEDS"


class BindingSpec(BaseModel):
    """Configuration for one logical control."""

    # Unknown keys are kept so shape scripts can read them through `data`.
    model_config = ConfigDict(frozen=True, extra="allow")

    key: int | list[int] | None = Field(
        default=None, description="Raw key identifier(s); defaults to the entry's index"
    )
    name: str | None = Field(default=None, description="Property name used when broadcasting")
    type: str | None = Field(default=None, description="Declared type (button, toggle, scalar, ...)")
    map: list[Any] | dict[str, Any] | None = Field(
        default=None, description="Control points, or an on/off table for buttons and toggles"
    )
    out: list[str] | str | None = Field(default=None, description="Target override list")
    shape: str | None = Field(default=None, description="Shape script source")
    value: Any = Field(default=None, description="Initial value, broadcast at startup")

    @field_validator("map", mode="before")
    @classmethod
    def yaml_switch_keys(cls, v: Any) -> Any:
        """YAML 1.1 loads bare ``on``/``off`` keys as booleans; restore the names."""
        if isinstance(v, dict):
            return {("on" if k else "off") if isinstance(k, bool) else str(k): e for k, e in v.items()}
        return v

    @property
    def display_name(self) -> str:
        """Name used as the broadcast property."""
        return self.name or "unknownName"

    @property
    def targets(self) -> list[Target] | None:
        """Parsed override targets, or None when the binding uses the defaults."""
        if self.out is None:
            return None
        return parse_targets(self.out)

    def keys(self, index: int) -> list[int]:
        """
        Raw key identifiers this binding responds to.

        Args:
            index: Position of the binding in its device section, used when no key is set
        """
        if self.key is None:
            return [index]
        if isinstance(self.key, list):
            return list(self.key)
        return [self.key]


class PulseSpec(BindingSpec):
    """A synthetic device firing on a fixed period."""

    name: str = Field(description="Device name of the pulse")
    bpm: float | None = Field(default=None, gt=0, description="Beats per minute")
    fps: float | None = Field(default=None, gt=0, description="Frames per second")
    interval: float | None = Field(default=None, gt=0, description="Period in milliseconds")

    @model_validator(mode="after")
    def check_period(self) -> "PulseSpec":
        """Exactly one of bpm, fps and interval must be given."""
        given = [f for f in ("bpm", "fps", "interval") if getattr(self, f) is not None]
        if len(given) != 1:
            raise ValueError(
                f"pulse '{self.name}' needs exactly one of bpm, fps or interval (got {given or 'none'})"
            )
        return self

    @property
    def period(self) -> float:
        """Firing period in seconds."""
        if self.bpm is not None:
            return 60.0 / self.bpm
        if self.fps is not None:
            return 1.0 / self.fps
        return self.interval / 1000.0


class RouterConfig(BaseModel):
    """Top-level configuration file."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    globals_: dict[str, Any] = Field(
        default_factory=dict, alias="global", description="Script globals, exposed as `shared`"
    )
    out: list[str] = Field(default_factory=list, description="Default target addresses")
    inputs: dict[str, list[BindingSpec]] = Field(
        default_factory=dict, alias="in", description="Bindings per input device"
    )
    pulses: list[PulseSpec] = Field(default_factory=list, alias="pulse", description="Pulse devices")

    @field_validator("globals_", mode="before")
    @classmethod
    def none_globals(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("out", mode="before")
    @classmethod
    def scalar_out(cls, v: Any) -> Any:
        """Accept a single address as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("inputs", mode="before")
    @classmethod
    def keyed_sections(cls, v: Any) -> Any:
        """
        Normalize device sections written as a mapping of key to binding.

        ``{16: {type: button}}`` becomes ``[{key: 16, type: button}]``.
        """
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v

        normalized = {}
        for device, section in v.items():
            if section is None:
                normalized[device] = []
            elif isinstance(section, dict):
                entries = []
                for key, spec in section.items():
                    spec = dict(spec or {})
                    spec.setdefault("key", int(key))
                    entries.append(spec)
                normalized[device] = entries
            else:
                normalized[device] = section
        return normalized

    @field_validator("pulses", mode="before")
    @classmethod
    def none_pulses(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def check_device_names(self) -> "RouterConfig":
        """Device names must be unique and must not use the reserved feedback suffix."""
        names = list(self.inputs) + [p.name for p in self.pulses]
        for name in names:
            if name.endswith(FEEDBACK_SUFFIX):
                raise ValueError(f"device name '{name}' must not end with {FEEDBACK_SUFFIX}")
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate device names: {', '.join(duplicates)}")
        return self

    @property
    def targets(self) -> list[Target]:
        """Parsed default targets, in configured order."""
        return parse_targets(self.out)
