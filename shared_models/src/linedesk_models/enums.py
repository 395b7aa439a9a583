from enum import Enum


class LineType(str, Enum):
    DIALOG = "dialog"
    OPTIONS = "options"
    EVENT = "event"
    SHOW_BACKGROUND = "showBackground"
    SWITCH = "switch"
    NEXT_SECTION = "nextSection"


class EntryCreationPolicy(str, Enum):
    """When the translation entry behind a dialog/option text is created.

    EAGER creates it together with the line, LAZY on the first text write.
    """

    EAGER = "eager"
    LAZY = "lazy"
