"""
Centralized role taxonomy and other lookup tables.

This module consolidates the role tables used by tree building, announcement
formatting and navigation filters. Import from here to keep the role
vocabulary consistent across modules.
"""

# =============================================================================
# Role Taxonomy
# =============================================================================

ROOT_ROLE = "document"
ROOT_ID = "root"

LANDMARK_ROLES = frozenset(
    {
        "banner",
        "complementary",
        "contentinfo",
        "form",
        "main",
        "navigation",
        "region",
        "search",
    }
)

# Landmark roles that only count as landmarks when they carry a name
NAMED_LANDMARK_ROLES = frozenset({"form", "region"})

WIDGET_ROLES = frozenset(
    {
        "button",
        "checkbox",
        "combobox",
        "gridcell",
        "link",
        "listbox",
        "menuitem",
        "menuitemcheckbox",
        "menuitemradio",
        "option",
        "radio",
        "scrollbar",
        "searchbox",
        "slider",
        "spinbutton",
        "switch",
        "tab",
        "tabpanel",
        "textbox",
        "treeitem",
    }
)

COMPOSITE_ROLES = frozenset(
    {"grid", "menu", "menubar", "radiogroup", "tablist", "tree", "treegrid"}
)

STRUCTURE_ROLES = frozenset(
    {
        "application",
        "article",
        "blockquote",
        "caption",
        "cell",
        "code",
        "columnheader",
        "definition",
        "deletion",
        "dialog",
        "alertdialog",
        "directory",
        "document",
        "emphasis",
        "feed",
        "figure",
        "generic",
        "group",
        "heading",
        "img",
        "insertion",
        "list",
        "listitem",
        "math",
        "meter",
        "none",
        "note",
        "paragraph",
        "presentation",
        "progressbar",
        "row",
        "rowgroup",
        "rowheader",
        "separator",
        "strong",
        "table",
        "term",
        "toolbar",
        "tooltip",
    }
)

LIVE_REGION_ROLES = frozenset({"alert", "log", "marquee", "status", "timer"})

KNOWN_ROLES = LANDMARK_ROLES | WIDGET_ROLES | COMPOSITE_ROLES | STRUCTURE_ROLES | LIVE_REGION_ROLES

PRESENTATIONAL_ROLES = frozenset({"none", "presentation"})

# Roles whose accessible name may come from their own content
NAME_FROM_CONTENT_ROLES = frozenset(
    {
        "button",
        "cell",
        "checkbox",
        "columnheader",
        "gridcell",
        "heading",
        "link",
        "listitem",
        "menuitem",
        "menuitemcheckbox",
        "menuitemradio",
        "option",
        "radio",
        "row",
        "rowheader",
        "switch",
        "tab",
        "tooltip",
        "treeitem",
    }
)

# Roles whose descendants are folded into the node itself
CHILDREN_PRESENTATIONAL_ROLES = frozenset(
    {
        "button",
        "checkbox",
        "img",
        "math",
        "menuitemcheckbox",
        "menuitemradio",
        "meter",
        "progressbar",
        "radio",
        "scrollbar",
        "separator",
        "slider",
        "switch",
        "tab",
    }
)

# Containers that are traversed but never stopped on
STRUCTURAL_ROLES = frozenset({"row", "rowgroup"})

TABLE_ROLES = frozenset({"grid", "table", "treegrid"})
CELL_ROLES = frozenset({"cell", "columnheader", "gridcell", "rowheader"})
HEADER_CELL_ROLES = frozenset({"columnheader", "rowheader"})

GRAPHIC_ROLES = frozenset({"img", "figure"})
LIST_ROLES = frozenset({"directory", "list"})

FORM_CONTROL_ROLES = frozenset(
    {
        "button",
        "checkbox",
        "combobox",
        "listbox",
        "radio",
        "searchbox",
        "slider",
        "spinbutton",
        "switch",
        "textbox",
    }
)

TEXT_INPUT_ROLES = frozenset({"combobox", "searchbox", "textbox"})

# Item roles and the container roles that own their set
SET_ITEM_ROLES = {
    "listitem": frozenset({"list", "directory"}),
    "menuitem": frozenset({"group", "menu", "menubar"}),
    "menuitemcheckbox": frozenset({"group", "menu", "menubar"}),
    "menuitemradio": frozenset({"group", "menu", "menubar"}),
    "option": frozenset({"group", "listbox"}),
    "radio": frozenset({"radiogroup"}),
    "tab": frozenset({"tablist"}),
    "treeitem": frozenset({"group", "tree"}),
}

SET_CONTAINER_ROLES = frozenset().union(*SET_ITEM_ROLES.values())


# =============================================================================
# HTML Element Tables
# =============================================================================

SECTIONING_TAGS = frozenset({"article", "aside", "main", "nav", "section"})

HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

# Elements with a fixed implicit role (context-dependent ones live in roles.py)
IMPLICIT_ROLES = {
    "address": "group",
    "article": "article",
    "aside": "complementary",
    "blockquote": "blockquote",
    "button": "button",
    "caption": "caption",
    "code": "code",
    "datalist": "listbox",
    "dd": "definition",
    "del": "deletion",
    "details": "group",
    "dfn": "term",
    "dialog": "dialog",
    "dt": "term",
    "em": "emphasis",
    "fieldset": "group",
    "figure": "figure",
    "hr": "separator",
    "ins": "insertion",
    "li": "listitem",
    "main": "main",
    "math": "math",
    "menu": "list",
    "meter": "meter",
    "nav": "navigation",
    "ol": "list",
    "optgroup": "group",
    "option": "option",
    "output": "status",
    "p": "paragraph",
    "progress": "progressbar",
    "search": "search",
    "strong": "strong",
    "summary": "button",
    "svg": "img",
    "table": "table",
    "tbody": "rowgroup",
    "textarea": "textbox",
    "tfoot": "rowgroup",
    "thead": "rowgroup",
    "tr": "row",
    "ul": "list",
}

INPUT_TYPE_ROLES = {
    "button": "button",
    "checkbox": "checkbox",
    "email": "textbox",
    "image": "button",
    "number": "spinbutton",
    "password": "textbox",
    "radio": "radio",
    "range": "slider",
    "reset": "button",
    "search": "searchbox",
    "submit": "button",
    "tel": "textbox",
    "text": "textbox",
    "url": "textbox",
}

# Explicit roles permitted per element; elements not listed accept any role
ALLOWED_ROLES = {
    "a[href]": frozenset(
        {
            "button",
            "checkbox",
            "link",
            "menuitem",
            "menuitemcheckbox",
            "menuitemradio",
            "option",
            "radio",
            "switch",
            "tab",
            "treeitem",
        }
    ),
    "button": frozenset(
        {
            "button",
            "checkbox",
            "combobox",
            "gridcell",
            "link",
            "menuitem",
            "menuitemcheckbox",
            "menuitemradio",
            "option",
            "radio",
            "separator",
            "slider",
            "switch",
            "tab",
            "treeitem",
        }
    ),
    "h": frozenset({"heading", "none", "presentation", "tab"}),
    "input[checkbox]": frozenset(
        {"button", "checkbox", "menuitemcheckbox", "option", "switch"}
    ),
    "input[radio]": frozenset({"menuitemradio", "radio"}),
    "input[text]": frozenset({"combobox", "searchbox", "spinbutton", "textbox"}),
    "main": frozenset({"main"}),
    "nav": frozenset({"menu", "menubar", "navigation", "none", "presentation", "tablist"}),
    "ul": frozenset(
        {
            "directory",
            "group",
            "list",
            "listbox",
            "menu",
            "menubar",
            "none",
            "presentation",
            "radiogroup",
            "tablist",
            "toolbar",
            "tree",
        }
    ),
    "textarea": frozenset({"textbox"}),
    "select": frozenset({"combobox", "listbox", "menu"}),
}

# Form-associated elements that can be labelled by <label>
LABELABLE_TAGS = frozenset(
    {"button", "input", "meter", "output", "progress", "select", "textarea"}
)

NATIVELY_FOCUSABLE_TAGS = frozenset({"button", "input", "select", "textarea", "summary"})

DISABLEABLE_TAGS = frozenset(
    {"button", "fieldset", "input", "optgroup", "option", "select", "textarea"}
)

# Content collected without separators
INLINE_TAGS = frozenset(
    {
        "a",
        "abbr",
        "b",
        "bdi",
        "bdo",
        "cite",
        "code",
        "data",
        "dfn",
        "em",
        "i",
        "kbd",
        "label",
        "mark",
        "q",
        "s",
        "samp",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "time",
        "u",
        "var",
    }
)

# Elements never rendered by a browser
NON_RENDERED_TAGS = frozenset(
    {"head", "link", "meta", "noscript", "script", "style", "template", "title"}
)

TEXT_TAG = "#text"


# =============================================================================
# Live Regions
# =============================================================================

RELEVANT_TOKENS = ("additions", "removals", "text", "attributes")
DEFAULT_RELEVANT = frozenset({"additions", "text"})

# role -> (politeness, atomic)
LIVE_ROLE_DEFAULTS = {
    "alert": ("assertive", True),
    "log": ("polite", False),
    "marquee": ("off", False),
    "status": ("polite", True),
    "timer": ("off", False),
}


# =============================================================================
# Announcement Vocabulary
# =============================================================================

ROLE_LABELS = {
    "alert": "alert",
    "alertdialog": "alert dialog",
    "application": "application",
    "article": "article",
    "banner": "banner landmark",
    "blockquote": "block quote",
    "button": "button",
    "checkbox": "checkbox",
    "columnheader": "column header",
    "combobox": "combo box",
    "complementary": "complementary landmark",
    "contentinfo": "content info landmark",
    "definition": "definition",
    "deletion": "deleted",
    "dialog": "dialog",
    "directory": "directory",
    "feed": "feed",
    "figure": "figure",
    "form": "form landmark",
    "grid": "grid",
    "group": "grouping",
    "img": "graphic",
    "insertion": "inserted",
    "link": "link",
    "list": "list",
    "listbox": "list box",
    "listitem": "list item",
    "log": "log",
    "main": "main landmark",
    "marquee": "marquee",
    "math": "math",
    "menu": "menu",
    "menubar": "menu bar",
    "menuitem": "menu item",
    "menuitemcheckbox": "menu item checkbox",
    "menuitemradio": "menu item radio button",
    "meter": "meter",
    "navigation": "navigation landmark",
    "note": "note",
    "option": "option",
    "progressbar": "progress bar",
    "radio": "radio button",
    "radiogroup": "radio group",
    "region": "region landmark",
    "rowheader": "row header",
    "scrollbar": "scroll bar",
    "search": "search landmark",
    "searchbox": "search edit",
    "separator": "separator",
    "slider": "slider",
    "spinbutton": "spin button",
    "status": "status",
    "switch": "switch",
    "tab": "tab",
    "table": "table",
    "tablist": "tab list",
    "tabpanel": "tab panel",
    "term": "term",
    "textbox": "edit",
    "timer": "timer",
    "toolbar": "tool bar",
    "tooltip": "tool tip",
    "tree": "tree view",
    "treegrid": "tree grid",
    "treeitem": "tree view item",
}

# Landmark role names used in entering/exiting announcements
LANDMARK_NAMES = {
    "banner": "banner",
    "complementary": "complementary",
    "contentinfo": "content info",
    "form": "form",
    "main": "main",
    "navigation": "navigation",
    "region": "region",
    "search": "search",
}
