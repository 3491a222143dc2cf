from enum import Enum
from typing import FrozenSet, Iterable, List


class Option(Enum):
    """Named switches consumed by the scraper and the fetcher."""
    DEBUG_MODE = "debug_mode"
    SAVE_LINKS = "save_links"
    SAVE_CONTENT = "save_content"
    UNLIMITED = "unlimited"
    RESTRICT_LANGUAGE = "restrict_language"


class OptionFlags:
    """Immutable set of enabled options."""

    def __init__(self, options: Iterable[Option] = ()):
        self._options: FrozenSet[Option] = frozenset(options)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "OptionFlags":
        """Build flags from option names such as ``"save_links"`` or ``"DEBUG_MODE"``.

        Unknown names raise ValueError so typos in config files are not ignored.
        """
        options = []
        for name in names:
            key = str(name).strip().upper().replace("-", "_")
            if not key:
                continue
            try:
                options.append(Option[key])
            except KeyError:
                raise ValueError(f"unknown option: {name}") from None
        return cls(options)

    def is_set(self, option: Option) -> bool:
        return option in self._options

    def with_option(self, option: Option) -> "OptionFlags":
        return OptionFlags(self._options | {option})

    def names(self) -> List[str]:
        return sorted(o.value for o in self._options)

    def __eq__(self, other):
        if not isinstance(other, OptionFlags):
            return NotImplemented
        return self._options == other._options

    def __hash__(self):
        return hash(self._options)

    def __repr__(self):
        return f"<OptionFlags {self.names()}>"
