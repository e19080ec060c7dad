from models.component import Component
from models.module import Module
from models.registry import ModuleRegistry, ValidationReport

__all__ = [
    "Component",
    "Module",
    "ModuleRegistry",
    "ValidationReport",
]
