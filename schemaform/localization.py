"""
Localized string lookup for schema titles and descriptions.
"""

from typing import Any, List, Mapping, Optional, Union

DEFAULT_LANGUAGE = "en"

LocalizedText = Optional[Union[str, Mapping[str, str]]]


def resolve(text: LocalizedText, preferred_lang: str = DEFAULT_LANGUAGE) -> str:
    """
    Pick the display string for a language.

    Bare strings are returned unchanged. Mappings yield the preferred
    language when present, otherwise the first value in insertion order.

    Args:
        text: Language code -> string mapping, a bare string, or None
        preferred_lang: Language code to prefer

    Returns:
        Display string, "" when nothing is available
    """
    if not text:
        return ""
    if isinstance(text, str):
        return text
    value = text.get(preferred_lang)
    if value:
        return value
    return next(iter(text.values()), None) or ""


def available_languages(node: Any) -> List[str]:
    """Language codes used by the titles and descriptions of a schema tree."""
    languages: List[str] = []

    def visit(current: Any) -> None:
        for text in (current.title, current.description):
            if isinstance(text, Mapping):
                for lang in text:
                    if lang not in languages:
                        languages.append(lang)
        for child in current.ordered_children():
            visit(child[1])

    visit(node)
    return languages
