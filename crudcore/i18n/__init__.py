"""本地化文本查询."""

from crudcore.i18n.loader import load_language
from crudcore.i18n.translator import LanguageContext, Translator, translate

__all__ = ["LanguageContext", "Translator", "load_language", "translate"]
