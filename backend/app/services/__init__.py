"""Business logic services for ClerkSmart.

This package intentionally avoids eager imports to prevent circular import
chains during application startup.
"""

from importlib import import_module

__all__ = [
    # Repositories
    "CaseRepository",
    "SQLCaseRepository",
    "InMemoryCaseRepository",
    "DepartmentRepository",
    "SQLDepartmentRepository",
    "InMemoryDepartmentRepository",
    "UserRepository",
    "SQLUserRepository",
    "InMemoryUserRepository",
    # Model integration
    "GeminiClient",
    "build_model_client",
    "classify_error",
    "generate_case_summary",
]

_LAZY_IMPORTS = {
    "CaseRepository": ("app.services.cases", "CaseRepository"),
    "SQLCaseRepository": ("app.services.cases", "SQLCaseRepository"),
    "InMemoryCaseRepository": ("app.services.cases", "InMemoryCaseRepository"),
    "DepartmentRepository": ("app.services.departments", "DepartmentRepository"),
    "SQLDepartmentRepository": ("app.services.departments", "SQLDepartmentRepository"),
    "InMemoryDepartmentRepository": (
        "app.services.departments",
        "InMemoryDepartmentRepository",
    ),
    "UserRepository": ("app.services.users", "UserRepository"),
    "SQLUserRepository": ("app.services.users", "SQLUserRepository"),
    "InMemoryUserRepository": ("app.services.users", "InMemoryUserRepository"),
    "GeminiClient": ("app.services.ai", "GeminiClient"),
    "build_model_client": ("app.services.ai", "build_model_client"),
    "classify_error": ("app.services.ai", "classify_error"),
    "generate_case_summary": ("app.services.ai", "generate_case_summary"),
}


def __getattr__(name: str):
    target = _LAZY_IMPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    return getattr(import_module(module_name), attr_name)
