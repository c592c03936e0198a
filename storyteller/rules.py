"""
Storyteller - Keyword Rules

Keyword tables that act as the enhancer's classifiers, and the single
matching routine shared by themes, emotions and content warnings.

Tables map a category name to keywords. A category matches when any of
its keywords occurs as a case-insensitive substring of the text; results
follow table declaration order and are cut at the table's cap.

Rules File (YAML):
    Every section is optional; a section present in the file replaces
    the built-in section of the same name.

        themes:
          housing: [house, home, rent]
          land: [country, land, river]
        emotions:
          hopeful: [hope, future]
        content_warnings:
          death: [death, died, funeral]
        emotional_vocabulary: [feel, heart, remember]
        caps:
          themes: 5
          emotions: 4
          content_warnings: null
          key_quotes: 5

Usage:
    from storyteller.rules import default_rules, load_rules, match_categories

    rules = load_rules(Path("rules.yaml"))
    themes = match_categories(text, rules.themes, rules.theme_cap)
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .exceptions import ConfigurationError
from .logger import get_logger

__all__ = [
    'THEME_KEYWORDS',
    'EMOTION_KEYWORDS',
    'CONTENT_WARNING_KEYWORDS',
    'EMOTIONAL_VOCABULARY',
    'KeywordRules',
    'default_rules',
    'load_rules',
    'match_categories',
]

log = get_logger(__name__)


# =============================================================================
# Built-in Tables
# =============================================================================

THEME_KEYWORDS: Dict[str, List[str]] = {
    "housing": ["house", "home", "housing", "rent", "homeless", "accommodation"],
    "community": ["community", "together", "support", "help", "neighbor"],
    "health": ["health", "hospital", "doctor", "medical", "treatment"],
    "family": ["family", "children", "parent", "mother", "father", "son", "daughter"],
    "work": ["work", "job", "employment", "career", "business"],
    "culture": ["culture", "traditional", "aboriginal", "indigenous", "country"],
    "education": ["school", "education", "learning", "teacher", "student"],
    "resilience": ["strong", "survive", "overcome", "persevere", "fight"],
}

EMOTION_KEYWORDS: Dict[str, List[str]] = {
    "grateful": ["grateful", "thankful", "appreciate", "blessed"],
    "hopeful": ["hope", "optimistic", "future", "better", "positive"],
    "determined": ["determined", "fight", "never give up", "persist"],
    "proud": ["proud", "achievement", "accomplish", "success"],
    "concerned": ["worried", "concerned", "anxious", "fear"],
    "sad": ["sad", "disappointed", "grief", "loss"],
    "angry": ["angry", "frustrated", "mad", "upset"],
    "reflective": ["remember", "think", "realize", "understand"],
}

CONTENT_WARNING_KEYWORDS: Dict[str, List[str]] = {
    "mental_health": ["suicide", "depression", "mental health", "anxiety"],
    "violence": ["violence", "abuse", "assault", "attack"],
    "substance_use": ["drugs", "alcohol", "addiction", "overdose"],
    "trauma": ["trauma", "ptsd", "flashback", "nightmare"],
    "death": ["death", "died", "funeral", "passed away"],
}

# Feelings, intensifiers and memory words that mark a quotable sentence.
EMOTIONAL_VOCABULARY: List[str] = [
    "feel", "felt", "emotion", "heart", "soul", "love", "hope", "fear",
    "angry", "sad", "happy", "grateful", "proud", "worried", "excited",
    "remember", "never", "always", "really", "truly", "deeply",
]

_TABLE_SECTIONS = ("themes", "emotions", "content_warnings")
_CAP_FIELDS = {
    "themes": "theme_cap",
    "emotions": "emotion_cap",
    "content_warnings": "warning_cap",
    "key_quotes": "quote_cap",
}


# =============================================================================
# Rules Container
# =============================================================================

@dataclass(frozen=True)
class KeywordRules:
    """
    Keyword tables and result caps used by the enhancer.

    Attributes:
        themes: Theme name -> keywords
        emotions: Emotion name -> keywords
        content_warnings: Warning category -> keywords
        emotional_vocabulary: Terms that qualify a sentence as a quote
        theme_cap: Maximum themes reported
        emotion_cap: Maximum emotions reported
        warning_cap: Maximum warnings reported (None reports all)
        quote_cap: Maximum key quotes reported
    """
    themes: Mapping[str, Sequence[str]] = field(
        default_factory=lambda: dict(THEME_KEYWORDS)
    )
    emotions: Mapping[str, Sequence[str]] = field(
        default_factory=lambda: dict(EMOTION_KEYWORDS)
    )
    content_warnings: Mapping[str, Sequence[str]] = field(
        default_factory=lambda: dict(CONTENT_WARNING_KEYWORDS)
    )
    emotional_vocabulary: Sequence[str] = field(
        default_factory=lambda: list(EMOTIONAL_VOCABULARY)
    )
    theme_cap: Optional[int] = 5
    emotion_cap: Optional[int] = 4
    warning_cap: Optional[int] = None
    quote_cap: Optional[int] = 5


def default_rules() -> KeywordRules:
    """Return the built-in English rule set."""
    return KeywordRules()


def match_categories(
    text: str,
    table: Mapping[str, Sequence[str]],
    cap: Optional[int] = None,
) -> List[str]:
    """
    Report the categories of *table* whose keywords occur in *text*.

    Args:
        text: Text to scan (matched case-insensitively)
        table: Category name -> keywords, in declaration order
        cap: Maximum number of categories to return; None for no limit

    Returns:
        Matching category names in declaration order, without duplicates
    """
    lowered = text.lower()
    found: List[str] = []
    for category, keywords in table.items():
        if cap is not None and len(found) >= cap:
            break
        if any(keyword.lower() in lowered for keyword in keywords):
            found.append(category)
    return found


# =============================================================================
# Loading
# =============================================================================

def _parse_table(section: str, raw: Any, path: Path) -> Dict[str, List[str]]:
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"'{section}' must be a mapping of name to keywords in: {path}",
            config_key=section,
        )

    table: Dict[str, List[str]] = {}
    for name, keywords in raw.items():
        key = f"{section}.{name}"
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError(f"Invalid category name in: {path}", config_key=key)
        if not isinstance(keywords, list) or not keywords:
            raise ConfigurationError(
                f"'{key}' must be a non-empty list of keywords in: {path}",
                config_key=key,
            )
        if not all(isinstance(k, str) and k.strip() for k in keywords):
            raise ConfigurationError(
                f"'{key}' contains an empty or non-string keyword in: {path}",
                config_key=key,
            )
        table[name] = [k.strip() for k in keywords]
    return table


def _parse_cap(name: str, raw: Any, path: Path) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ConfigurationError(
            f"Cap '{name}' must be a non-negative integer or null in: {path}",
            config_key=f"caps.{name}",
        )
    return raw


def load_rules(path: Path, base: Optional[KeywordRules] = None) -> KeywordRules:
    """
    Load keyword rules from a YAML file.

    Sections present in the file replace those of *base* (the built-in
    rules by default); absent sections are inherited.

    Args:
        path: YAML rules file
        base: Rules to override

    Returns:
        Merged KeywordRules

    Raises:
        ConfigurationError: If the file is missing, unreadable, or malformed
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Rules file not found: {path}", config_key="rules_file")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read rules file {path}: {e}", config_key="rules_file")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Rules file must contain a mapping: {path}", config_key="rules_file")

    overrides: Dict[str, Any] = {}
    for section in _TABLE_SECTIONS:
        if section in data:
            overrides[section] = _parse_table(section, data[section], path)

    if "emotional_vocabulary" in data:
        vocabulary = data["emotional_vocabulary"]
        if not isinstance(vocabulary, list) or not all(
            isinstance(v, str) and v.strip() for v in vocabulary
        ):
            raise ConfigurationError(
                f"'emotional_vocabulary' must be a list of words in: {path}",
                config_key="emotional_vocabulary",
            )
        overrides["emotional_vocabulary"] = [v.strip() for v in vocabulary]

    caps = data.get("caps", {})
    if not isinstance(caps, dict):
        raise ConfigurationError(f"'caps' must be a mapping in: {path}", config_key="caps")
    for name, value in caps.items():
        if name not in _CAP_FIELDS:
            raise ConfigurationError(f"Unknown cap '{name}' in: {path}", config_key=f"caps.{name}")
        overrides[_CAP_FIELDS[name]] = _parse_cap(name, value, path)

    rules = replace(base or default_rules(), **overrides)
    log.info(
        "rules_loaded",
        path=str(path),
        overridden=sorted(overrides),
        themes=len(rules.themes),
        emotions=len(rules.emotions),
        content_warnings=len(rules.content_warnings),
    )
    return rules
