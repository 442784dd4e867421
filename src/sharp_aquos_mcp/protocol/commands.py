"""Command catalog for the two supported Aquos protocol revisions.

Each command name maps to a :class:`CommandSpec` binding an argument domain
(which carries the opcodes and the validation rules) plus the usage and
description text shown by ``aquosctl --list`` and the MCP ``list_commands``
tool.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence

from .domains import (
    ArgumentDomain,
    BoundedInt,
    Choice,
    DottedPair,
    Fixed,
    InputSelect,
    SplitRange,
    ToggleChoice,
)
from .framing import Frame


class ProtocolVariant(str, Enum):
    """Protocol table revisions, selected by configuration."""

    LEGACY = "legacy"
    EXTENDED = "extended"

    @property
    def revision(self) -> str:
        return _REVISIONS[self]

    @property
    def models(self) -> str:
        return _MODELS[self]


_REVISIONS = {
    ProtocolVariant.LEGACY: "12/16/05",
    ProtocolVariant.EXTENDED: "12/17/10",
}

_MODELS = {
    ProtocolVariant.LEGACY: "LC-42/46/52D64U",
    ProtocolVariant.EXTENDED: "LC-80LE844U/LC-70LE847U/LC-60LE847U/LC-70LE745U/LC-60LE745U",
}


@dataclass(frozen=True)
class CommandSpec:
    """One entry in a command table."""

    name: str
    domain: ArgumentDomain
    description: str
    usage_text: str = ""

    @property
    def opcode(self) -> str:
        """Primary opcode; multi-opcode commands list the rest in ``opcodes``."""
        return self.domain.opcodes[0]

    @property
    def opcodes(self) -> tuple[str, ...]:
        return self.domain.opcodes

    @property
    def arity(self) -> int:
        return self.domain.arity

    @property
    def usage(self) -> str:
        return self.usage_text or self.domain.usage()

    def frames(self, args: Sequence[str] = ()) -> list[Frame]:
        """Validate ``args`` and build the frames for this command."""
        return self.domain.frames(self.name, tuple(args))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "opcodes": list(self.opcodes),
            "arity": self.arity,
            "usage": self.usage,
            "description": self.description,
        }


class CommandTable:
    """Ordered, read-only mapping of command names to specs."""

    def __init__(self, variant: ProtocolVariant, specs: Sequence[CommandSpec]) -> None:
        self.variant = variant
        self._specs: dict[str, CommandSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate command '{spec.name}'")
            self._specs[spec.name] = spec

    def lookup(self, name: str) -> CommandSpec | None:
        """Exact, case-sensitive lookup. Returns None for unknown names."""
        return self._specs.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._specs)

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs


# ─── TOKEN TABLES ─────────────────────────────────────────────────────

AVMODE_LEGACY = {
    "standard": 1,
    "movie": 2,
    "game": 3,
    "user": 4,
    "dyn-fixed": 5,
    "dyn": 6,
    "pc": 7,
    "xvycc": 8,
}
AVMODE_EXTENDED = {
    **AVMODE_LEGACY,
    "standard-3d": 14,
    "movie-3d": 15,
    "game-3d": 16,
    "auto": 100,
}

VIEWMODE_LEGACY = {
    "sidebar": 1,
    "sstretch": 2,
    "zoom": 3,
    "stretch": 4,
    "normal": 5,
    "zoom-pc": 6,
    "stretch-pc": 7,
    "dotbydot": 8,
    "full": 9,
}
VIEWMODE_EXTENDED = {**VIEWMODE_LEGACY, "auto": 10, "original": 11}

# The 12/17/10 table renames "on" to "normal" and adds the 3D modes (3 is unused).
SURROUND_LEGACY = {"on": 1, "off": 2}
SURROUND_EXTENDED = {
    "normal": 1,
    "off": 2,
    "3d-hall": 4,
    "3d-movie": 5,
    "3d-standard": 6,
    "3d-stadium": 7,
}

SLEEP_TIMER = {"off": 0, "0": 0, "30": 1, "60": 2, "90": 3, "120": 4}

THREE_D_MODES = {
    "off": 0,
    "2d3d": 1,
    "sbs": 2,
    "tab": 3,
    "3d2d-sbs": 4,
    "3d2d-tab": 5,
    "3d-auto": 6,
    "2d-auto": 7,
}

REMOTE_BUTTONS = {
    **{str(digit): digit for digit in range(10)},
    ".": 10,
    "ent": 11,
    "enter": 11,
    "power": 12,
    "display": 13,
    "power-source": 14,
    "rew": 15,
    "play": 16,
    "ff": 17,
    "pause": 18,
    "prev": 19,
    "stop": 20,
    "next": 21,
    "rec": 22,
    "option": 23,
    "sleep": 24,
    "cc": 27,
    "avmode": 28,
    "viewmode": 29,
    "flashback": 30,
    "mute": 31,
    "vol-": 32,
    "voldn": 32,
    "vol+": 33,
    "volup": 33,
    "chup": 34,
    "chdn": 35,
    "input": 36,
    "menu": 38,
    "startcenter": 39,
    "up": 41,
    "down": 42,
    "left": 43,
    "right": 44,
    "return": 45,
    "exit": 46,
    "fav": 47,
    "favorite": 47,
    "favoritech": 47,
    "3d-surround": 48,
    "audio": 49,
    "a": 50,
    "red": 50,
    "b": 51,
    "green": 51,
    "c": 52,
    "blue": 52,
    "d": 53,
    "yellow": 53,
    "freeze": 54,
    "favapp1": 55,
    "favapp2": 56,
    "favapp3": 57,
    "3d": 58,
    "netflix": 59,
}


# ─── TABLE CONSTRUCTION ──────────────────────────────────────────────

def _build_specs(variant: ProtocolVariant) -> list[CommandSpec]:
    extended = variant is ProtocolVariant.EXTENDED

    if extended:
        poenable = {"on": 1, "on-ip": 2, "off": 0}
    else:
        poenable = {"on": 1, "off": 0}

    specs = [
        CommandSpec(
            "poenable",
            Choice("RSPW", poenable),
            "Enable/Disable power on command.",
        ),
        CommandSpec(
            "power",
            Choice("POWR", {"on": 1, "off": 0}),
            "Turn TV on/off.",
        ),
        CommandSpec(
            "input",
            InputSelect("ITGD", "ITVD", "IAVD", inputs=8 if extended else 7),
            f"Select TV, INPUT1-{8 if extended else 7}; blank to toggle.",
        ),
        CommandSpec(
            "avmode",
            ToggleChoice("AVMD", AVMODE_EXTENDED if extended else AVMODE_LEGACY),
            "AV mode selection; blank to toggle.",
        ),
        CommandSpec(
            "vol",
            BoundedInt("VOLM", 0, 60),
            "Set volume (0-60).",
        ),
        # Real limits depend on view mode and signal type; 0-999 is the
        # widest value the parameter field can carry.
        CommandSpec(
            "hpos",
            BoundedInt("HPOS", 0, 999),
            "Horizontal Position. Ranges are on the position setting screen.",
            "<varies depending on View Mode or signal type>",
        ),
        CommandSpec(
            "vpos",
            BoundedInt("VPOS", 0, 999),
            "Vertical Position. Ranges are on the position setting screen.",
            "<varies depending on View Mode or signal type>",
        ),
        CommandSpec(
            "clock",
            BoundedInt("CLCK", 0, 180),
            "Only in PC mode.",
        ),
        CommandSpec(
            "phase",
            BoundedInt("PHSE", 1, 40),
            "Only in PC mode.",
        ),
        CommandSpec(
            "viewmode",
            ToggleChoice("WIDE", VIEWMODE_EXTENDED if extended else VIEWMODE_LEGACY),
            "View modes (vary depending on input signal type -- see manual).",
        ),
        CommandSpec(
            "mute",
            ToggleChoice("MUTE", {"on": 1, "off": 2}),
            "Mute on/off; blank to toggle.",
        ),
        CommandSpec(
            "surround",
            ToggleChoice("ACSU", SURROUND_EXTENDED if extended else SURROUND_LEGACY),
            "Surround mode; blank to toggle.",
        ),
        CommandSpec(
            "audiosel",
            Fixed("ACHA"),
            "Audio selection toggle.",
        ),
        CommandSpec(
            "sleep",
            Choice("OFTM", SLEEP_TIMER),
            "Sleep timer off or 30/60/90/120 minutes.",
            "{ off or 0 | 30 | 60 | 90 | 120 }",
        ),
        CommandSpec(
            "achan",
            BoundedInt("DCCH", 1, 135),
            "Analog channel selection. Over-the-air: 2-69, Cable: 1-135.",
        ),
        CommandSpec(
            "dchan",
            DottedPair("DA2P", (1, 99), (0, 99), digits=2),
            "Digital over-the-air channel selection.",
            "{ xx.yy } or { xx } (xx=channel 1-99, yy=subchannel 0-99)",
        ),
        CommandSpec(
            "dcabl1",
            DottedPair("DC2U", (1, 999), (0, 999), digits=3, minor_opcode="DC2L"),
            "Digital cable (type one).",
            "{ xxx.yyy } or { xxx } (xxx=major ch. 1-999, yyy=minor ch. 0-999)",
        ),
        CommandSpec(
            "dcabl2",
            SplitRange("DC10", "DC11", threshold=10000, maximum=16383),
            "Digital cable (type two), channels 0-16383.",
        ),
        CommandSpec(
            "chup",
            Fixed("CHUP"),
            "Channel up. Will switch to TV input if not already selected.",
        ),
        CommandSpec(
            "chdn",
            Fixed("CHDW"),
            "Channel down. Will switch to TV input if not already selected.",
        ),
        CommandSpec(
            "cc",
            Fixed("CLCP"),
            "Closed Caption toggle.",
        ),
    ]

    if extended:
        specs += [
            CommandSpec(
                "3d",
                Choice("TDCH", THREE_D_MODES),
                "3D mode selection.",
            ),
            CommandSpec(
                "button",
                Choice("RCKY", REMOTE_BUTTONS),
                "Simulate remote control button press.",
                "{ button on remote }",
            ),
        ]

    return specs


_TABLES: dict[ProtocolVariant, CommandTable] = {
    variant: CommandTable(variant, _build_specs(variant)) for variant in ProtocolVariant
}


def get_command_table(variant: ProtocolVariant | str = ProtocolVariant.LEGACY) -> CommandTable:
    """Return the shared command table for a protocol variant.

    Raises:
        ValueError: If ``variant`` names no known revision.
    """
    return _TABLES[ProtocolVariant(variant)]


def lookup(name: str, variant: ProtocolVariant | str = ProtocolVariant.LEGACY) -> CommandSpec | None:
    """Look up ``name`` in the table for ``variant``."""
    return get_command_table(variant).lookup(name)
