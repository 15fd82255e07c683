"""Read-only generator registry: maps domain to generator instance."""

from .division import DivisionGenerator
from .fractions import FractionsGenerator
from .multiplication import MultiplicationGenerator
from .patterns import PatternsGenerator
from .word_problems import WordProblemsGenerator

GENERATOR_REGISTRY = {
    "multiplication": MultiplicationGenerator(),
    "division": DivisionGenerator(),
    "fractions": FractionsGenerator(),
    "patterns": PatternsGenerator(),
    "word_problems": WordProblemsGenerator(),
}


def generator_for(domain: str):
    return GENERATOR_REGISTRY[str(getattr(domain, "value", domain))]


def domain_for_skill(skill_tag: str) -> str | None:
    """Resolve a fine skill tag (e.g. "frac_compare") to its domain."""
    for domain, gen in GENERATOR_REGISTRY.items():
        if any(s.tag == skill_tag for s in gen.skills):
            return domain
    return None
