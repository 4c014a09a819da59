"""
Technique -> UI component classification.

A technique record only carries an id, a technology and a title, so the
component it exercises is inferred from the title text. Rules are evaluated
in order and the first match wins: "label" must land on form inputs before
the later, broader rules get a chance to claim it.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

GENERAL_ELEMENT_KEY = "general"


@dataclass(frozen=True)
class ComponentMatch:
    component: str
    html_element: Optional[str] = None

    @property
    def merge_key(self) -> str:
        """Key used to merge techniques into one component record."""
        return f"{self.component}_{self.html_element or GENERAL_ELEMENT_KEY}"

    @property
    def target_label(self) -> str:
        """What a tester should look for on the page."""
        return self.html_element or self.component


Predicate = Callable[[str, str], bool]


def _title_has(*needles: str) -> Predicate:
    def _match(title: str, _technique_id: str) -> bool:
        return any(needle in title for needle in needles)

    return _match


def _link_rule(title: str, technique_id: str) -> bool:
    return "link" in title or "anchor" in title or "H30" in technique_id


def _aria_rule(title: str, technique_id: str) -> bool:
    return technique_id.startswith("ARIA") or "aria-" in title


# (predicate(lower-cased title, upper-cased id), outcome)
CLASSIFICATION_RULES: Tuple[Tuple[Predicate, ComponentMatch], ...] = (
    (_title_has("img", "image", "alt"), ComponentMatch("Images", "img")),
    (_title_has("input", "label", "form control"), ComponentMatch("Form Inputs", "input")),
    (_title_has("select", "dropdown"), ComponentMatch("Form Inputs", "select")),
    (_title_has("textarea"), ComponentMatch("Form Inputs", "textarea")),
    (_link_rule, ComponentMatch("Links", "a")),
    (_title_has("button"), ComponentMatch("Buttons", "button")),
    (_title_has("heading"), ComponentMatch("Headings", "h1-h6")),
    (_title_has("table"), ComponentMatch("Tables", "table")),
    (_title_has("video", "audio", "media"), ComponentMatch("Media Elements", "video/audio")),
    (_title_has("list"), ComponentMatch("Lists", "ul/ol")),
    (_aria_rule, ComponentMatch("ARIA Components", "various")),
    (_title_has("color", "contrast"), ComponentMatch("Color & Contrast")),
    (_title_has("text size", "font", "resize"), ComponentMatch("Text & Typography")),
    (_title_has("navigation", "menu"), ComponentMatch("Navigation")),
    (_title_has("focus", "keyboard"), ComponentMatch("Keyboard & Focus")),
)

FALLBACK_COMPONENT = ComponentMatch("General Content")


def classify_technique(technique: Mapping[str, Any]) -> ComponentMatch:
    """Map a technique record to the component (and element) it exercises."""
    title = str(technique.get("title") or "").lower()
    technique_id = str(technique.get("id") or "").upper()

    for predicate, outcome in CLASSIFICATION_RULES:
        if predicate(title, technique_id):
            return outcome
    return FALLBACK_COMPONENT


# ---------------------------------------------------------------------------
# Component -> category lookup
# ---------------------------------------------------------------------------

COMPONENT_CATEGORIES: Dict[str, Dict[str, str]] = {
    "Images": {
        "name": "Images & Graphics",
        "description": "Testing images, icons, graphics, and non-text content",
    },
    "Form Inputs": {
        "name": "Forms & Inputs",
        "description": "Testing form controls, inputs, labels, and form validation",
    },
    "Links": {
        "name": "Links & Navigation",
        "description": "Testing hyperlinks, navigation menus, and link purpose",
    },
    "Buttons": {
        "name": "Interactive Controls",
        "description": "Testing buttons, controls, and interactive elements",
    },
    "Headings": {
        "name": "Structure & Semantics",
        "description": "Testing headings, landmarks, and document structure",
    },
    "Tables": {
        "name": "Data Tables",
        "description": "Testing table structure, headers, and relationships",
    },
    "Media Elements": {
        "name": "Multimedia",
        "description": "Testing video, audio, captions, and transcripts",
    },
    "Lists": {
        "name": "Lists & Groups",
        "description": "Testing lists, list items, and grouped content",
    },
    "ARIA Components": {
        "name": "ARIA & Custom Widgets",
        "description": "Testing ARIA attributes, roles, and custom components",
    },
    "Color & Contrast": {
        "name": "Visual Design",
        "description": "Testing color contrast, color usage, and visual presentation",
    },
    "Text & Typography": {
        "name": "Text & Typography",
        "description": "Testing text sizing, spacing, and readability",
    },
    "Navigation": {
        "name": "Navigation & Wayfinding",
        "description": "Testing navigation systems and page wayfinding",
    },
    "Keyboard & Focus": {
        "name": "Keyboard Accessibility",
        "description": "Testing keyboard navigation and focus management",
    },
    "General Content": {
        "name": "General Content",
        "description": "Testing general content and page-level features",
    },
}

OTHER_CATEGORY: Dict[str, str] = {
    "name": "Other",
    "description": "Other testing requirements",
}


def get_component_category(component: str) -> Dict[str, str]:
    """Return the ``{"name", "description"}`` category for a component name."""
    return COMPONENT_CATEGORIES.get(component, OTHER_CATEGORY)


__all__ = [
    "CLASSIFICATION_RULES",
    "COMPONENT_CATEGORIES",
    "ComponentMatch",
    "OTHER_CATEGORY",
    "classify_technique",
    "get_component_category",
]
