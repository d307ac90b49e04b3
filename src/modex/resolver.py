"""
Heuristic resolution of usages and call sites.

Each resolution step is an ordered list of rules. A rule is a pure function of
the resolution context and the raw usage/call; it returns a result or None, and
the first rule returning a result wins. Reordering the lists changes the policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Collection, FrozenSet, List, Optional

from .node_types import CallSite, ImportTables, ModelRef, ModuleInfo, ResolvedTarget
from .usage import Usage

DEFAULT_MARKER = "models"
DEFAULT_SELF_NAMES: FrozenSet[str] = frozenset({"self", "cls"})


def is_model_module(module_path: str, marker: str = DEFAULT_MARKER) -> bool:
    """True when ``marker`` is an exact dotted component of ``module_path``."""
    if not module_path:
        return False
    return marker in module_path.split(".")


@dataclass
class ResolutionContext:
    module: ModuleInfo
    tables: ImportTables
    known_modules: Collection[str]
    current_class: str = ""
    marker: str = DEFAULT_MARKER
    self_names: FrozenSet[str] = DEFAULT_SELF_NAMES

    def is_model(self, module_path: str) -> bool:
        return is_model_module(module_path, self.marker)


# ---- model rules ----

# returned by a rule that claims the usage without naming a model; stops the rule list
NO_MODEL = ModelRef("", "")

NameModelRule = Callable[[ResolutionContext, str], Optional[ModelRef]]
AttrModelRule = Callable[[ResolutionContext, str, str], Optional[ModelRef]]


def model_from_imported_name(ctx: ResolutionContext, name: str) -> Optional[ModelRef]:
    """``from app.models.user import User`` ... ``User``"""
    target = ctx.tables.from_imports.get(name)
    if target and ctx.is_model(target.module):
        return ModelRef(target.module, target.name)
    return None


def model_from_module_alias(ctx: ResolutionContext, base: str, attr: str) -> Optional[ModelRef]:
    """``import app.models.user as users`` ... ``users.User``"""
    module_path = ctx.tables.modules.get(base)
    if not module_path:
        return None
    if ctx.is_model(module_path):
        return ModelRef(module_path, attr)
    return NO_MODEL


def model_from_imported_attr(ctx: ResolutionContext, base: str, attr: str) -> Optional[ModelRef]:
    """``from app.models import user`` ... ``user.User``, or ``User.objects`` on an imported model."""
    target = ctx.tables.from_imports.get(base)
    if not target:
        return None
    compound = f"{target.module}.{target.name}"
    if compound in ctx.known_modules and ctx.is_model(compound):
        return ModelRef(compound, attr)
    if ctx.is_model(target.module):
        return ModelRef(target.module, target.name)
    return None


NAME_MODEL_RULES: List[NameModelRule] = [model_from_imported_name]
ATTR_MODEL_RULES: List[AttrModelRule] = [model_from_module_alias, model_from_imported_attr]


def resolve_models(usage: Usage, ctx: ResolutionContext) -> List[ModelRef]:
    found: dict = {}
    for name in usage.names:
        for rule in NAME_MODEL_RULES:
            ref = rule(ctx, name)
            if ref is not None:
                found[ref] = None
                break
    for base, attr in usage.attrs:
        for rule in ATTR_MODEL_RULES:
            ref = rule(ctx, base, attr)
            if ref is not None:
                if ref is not NO_MODEL:
                    found[ref] = None
                break
    return list(found)


# ---- call rules ----

NameCallRule = Callable[[ResolutionContext, str], Optional[ResolvedTarget]]
AttrCallRule = Callable[[ResolutionContext, str, str], Optional[ResolvedTarget]]


def call_local_function(ctx: ResolutionContext, name: str) -> Optional[ResolvedTarget]:
    if name in ctx.module.functions:
        return ResolvedTarget(ctx.module.module_path, "", name)
    return None


def call_imported_function(ctx: ResolutionContext, name: str) -> Optional[ResolvedTarget]:
    target = ctx.tables.from_imports.get(name)
    if target and target.module in ctx.known_modules:
        return ResolvedTarget(target.module, "", target.name)
    return None


def call_own_method(ctx: ResolutionContext, base: str, attr: str) -> Optional[ResolvedTarget]:
    """``self.m()`` / ``cls.m()``: only methods declared directly on the current class."""
    if base not in ctx.self_names or not ctx.current_class:
        return None
    if attr in ctx.module.classes.get(ctx.current_class, {}):
        return ResolvedTarget(ctx.module.module_path, ctx.current_class, attr)
    return None


def call_module_alias(ctx: ResolutionContext, base: str, attr: str) -> Optional[ResolvedTarget]:
    module_path = ctx.tables.modules.get(base)
    if module_path and module_path in ctx.known_modules:
        return ResolvedTarget(module_path, "", attr)
    return None


def call_imported_submodule(ctx: ResolutionContext, base: str, attr: str) -> Optional[ResolvedTarget]:
    target = ctx.tables.from_imports.get(base)
    if not target:
        return None
    compound = f"{target.module}.{target.name}"
    if compound in ctx.known_modules:
        return ResolvedTarget(compound, "", attr)
    return None


def call_local_class(ctx: ResolutionContext, base: str, attr: str) -> Optional[ResolvedTarget]:
    """``ClassName.m()`` for a class of the current module."""
    methods = ctx.module.classes.get(base)
    if methods and attr in methods:
        return ResolvedTarget(ctx.module.module_path, base, attr)
    return None


NAME_CALL_RULES: List[NameCallRule] = [call_local_function, call_imported_function]
ATTR_CALL_RULES: List[AttrCallRule] = [
    call_own_method,
    call_module_alias,
    call_imported_submodule,
    call_local_class,
]


def resolve_call(call: CallSite, ctx: ResolutionContext) -> Optional[ResolvedTarget]:
    if call.kind == "name" and call.name:
        for rule in NAME_CALL_RULES:
            target = rule(ctx, call.name)
            if target is not None:
                return target
    elif call.kind == "attr" and call.base and call.attr:
        for attr_rule in ATTR_CALL_RULES:
            target = attr_rule(ctx, call.base, call.attr)
            if target is not None:
                return target
    return None
