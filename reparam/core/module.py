from typing import Callable, Optional, Dict, Any, get_type_hints, Type, ClassVar
from types import MappingProxyType
import functools
from dataclasses import dataclass
import inspect
import logging
import numbers

from prefect import flow, task

from ..distributions import Distribution


__all__ = [
    "Module",
    "InputSpec",
]

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class InputSpec:
    """Specification for a module input.

    Describes the expected type, requirement status, and default value for
    an input to a :class:`Module`. Used internally by :meth:`Module.set_input`
    to enforce validation and provide defaults.

    Attributes:
        type: Expected Python type for this input.
        required: Whether this input must be explicitly provided.
        default: Default value; `_MISSING` indicates no default provided.
    """
    type: Optional[Type] = None
    required: bool = False
    default: Any = _MISSING #_MISSING means "no default"


class Module(object):
    """Base class for all reparam modules.

    Provides dependency injection, input specification, type validation, and
    integration with Prefect tasks and flows. Each subclass wraps one piece
    of the inference engine (likelihood, optimizer, sampler, ...) and can
    depend on other modules.

    Typical usage:
        1. Subclass :class:`Module` and declare required dependencies via
           the class variable :pyattr:`DEPENDENCIES`.
        2. Define inputs using :meth:`set_input`.
        3. Register computational functions using :meth:`run_func`.
        4. Call registered functions as Prefect tasks, or call the pure
           method behind them directly when no Prefect run is wanted.

    Notes:
        - Functions registered via :meth:`run_func` are exposed as Prefect tasks
          or flows depending on the `as_task` flag. The undecorated function
          is available as ``module.<name>.fn``.
        - Dependencies are validated at both initialization and runtime.

    Attributes:
        DEPENDENCIES: Names and types of required dependency modules.
        dependencies: Injected dependency instances.
        inputs: Declared input specifications.
        _run_funcs: Registered computational functions.
    """

    DEPENDENCIES: ClassVar[Dict[str, Type['Module']]] = MappingProxyType({})

    def __init__(self, **dependencies: 'Module'):
        """Initializes the module and validates dependencies.

        Args:
            **dependencies: Dependency modules to inject into this module.

        Raises:
            RuntimeError: If required dependencies are missing or unexpected ones are provided.
            TypeError: If a dependency is not an instance of the declared type.
        """

        # Enforce that all declared dependencies are provided
        missing = [name for name in self.DEPENDENCIES if name not in dependencies]
        if missing:
            raise RuntimeError(f"Missing required dependencies: {missing}")

        # Enforce no unexpected dependencies
        unexpected = [name for name in dependencies if name not in self.DEPENDENCIES]
        if unexpected:
            raise RuntimeError(f"Unexpected dependencies provided: {unexpected}")

        # Enforce that each dependency is an instance of the declared type and a Module subclass
        for name, dep_instance in dependencies.items():
            if not isinstance(dep_instance, Module):
                raise TypeError(f"Dependency '{name}' must be Module subclass instance; got {type(dep_instance)}")
            expected = self.DEPENDENCIES[name]
            if isinstance(expected, type) and not isinstance(dep_instance, expected):
                raise TypeError(f"Dependency '{name}' must be {expected.__name__}; got {type(dep_instance).__name__}")

        self.dependencies = dict(dependencies)

        self.inputs: Dict[str, Dict[str, Any]] = {}
        self._run_funcs: Dict[str, Callable] = {}   # Registered run functions

        # Per-run-function input specification (built from signature or overridden)
        self._inputs_for_run: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def set_input(self, **input_defaults):
        """Defines input specifications for the module.

        Each keyword argument specifies either an :class:`InputSpec`
        (for type and requirement) or a simple default value. Specs set
        before :meth:`run_func` apply to the next registered run function.

        Example:
            >>> self.set_input(num_samples=InputSpec(type=int, required=True), proposal_std=1.0)

        Args:
            **input_defaults: Key–value pairs of input names and their specifications.
        """

        staged = self._inputs_for_run.setdefault("_default", {})
        for key, spec in input_defaults.items():
            if isinstance(spec, InputSpec):
                meta = {
                    'type': spec.type,
                    'required': spec.required,
                    'default': spec.default,
                }
            else:
                # default only
                meta = {
                    'type': None,
                    'required': False,
                    'default': spec,
                }
            self.inputs[key] = meta
            staged[key] = meta

    def run_func(
            self,
            f: Callable,
            *,
            name: Optional[str] = None,
            as_task: bool = True,
            ) -> Callable:
        """Registers a computational function as a Prefect-executable task or flow.

        Registered functions become callable attributes of the module
        (e.g., ``module.optimize(...)``).

        Steps performed:
            1. Infers input schema and type hints.
            2. Validates that dependencies are available.
            3. Applies type checking on inputs.
            4. Wraps as a Prefect task or flow depending on ``as_task``.

        Args:
            f: Function implementing the computation. Must take keyword arguments.
            name: Custom function name override.
                Defaults to the original function name.
            as_task: Whether to register the function as a Prefect task
                (``True``) or flow (``False``). Defaults to ``True``.

        Returns:
            Callable: The decorated Prefect task or flow.

        Raises:
            RuntimeError: If a run function with the same name is already registered.
        """

        run_name = name or f.__name__
        sig = inspect.signature(f)

        if run_name in self._run_funcs:
            raise RuntimeError(f"Run function '{run_name}' already registered")

        # infering inputs from signature at registration time
        def _autofill_inputs_from_signature(func: Callable, run_name: str) -> None:
            """Infers input specifications from a function’s signature and type hints.

            Dependency names are excluded from input registration; run
            functions reach dependencies through ``self.dependencies``.
            """
            hints = get_type_hints(func)
            specs: Dict[str, Dict[str, Any]] = {}
            for pname, param in sig.parameters.items():
                if pname == "self":
                    continue

                # dependency names are never inputs
                if pname in self.dependencies:
                    continue

                # classifying required vs optional by default
                has_default = (param.default is not inspect.Parameter.empty)
                default_val = param.default if has_default else _MISSING

                ann = hints.get(pname)
                ptype = ann if isinstance(ann, type) else None

                specs[pname] = {'type': ptype, 'required': not has_default, 'default': default_val}

            # merging any staged defaults from set_input() done before run registration
            if "_default" in self._inputs_for_run:
                specs = {**specs, **self._inputs_for_run.pop("_default")}

            self._inputs_for_run[run_name] = specs
            for k, meta in specs.items():
                self.inputs.setdefault(k, meta)

        def _ensure_inputs_satisfied(kwargs: Dict[str, Any], *, run_name: str) -> Dict[str, Any]:
            """Validates provided inputs and fills missing defaults.

            Raises:
                TypeError: If required inputs are missing or unexpected inputs are given.
            """

            input_specs = self._inputs_for_run.get(run_name, {})
            merged = dict(kwargs)

            # Filling defaults
            for k, meta in input_specs.items():
                if k not in merged and meta.get('default', _MISSING) is not _MISSING:
                    merged[k] = meta['default']

            # Missing required?
            missing = [k for k, meta in input_specs.items()
                       if meta.get('required') and k not in merged]
            if missing:
                raise TypeError(f"Missing required inputs for '{run_name}': {missing}")

            # Unknown keys? (ignore names that are parameters of the function but not inputs, e.g., deps)
            allowed = set(input_specs.keys())
            fn_params = set(sig.parameters.keys()) - {"self"}
            unknown = [k for k in merged.keys() if k not in allowed and k not in fn_params]
            if unknown:
                raise TypeError(f"Unknown inputs provided: {unknown}. Declared inputs are: {sorted(allowed)}")

            return merged

        def _ensure_dependencies_available():
            """Ensures all declared dependencies are available at runtime.

            Raises:
                RuntimeError: If any required dependencies are missing.
            """

            missing = [k for k in self.DEPENDENCIES if k not in self.dependencies]
            if missing:
                raise RuntimeError(
                    f"Missing required dependencies at runtime: {missing}. Available: {list(self.dependencies.keys())}"
                )

        def _matches(value, expected: type) -> bool:
            # numeric tower: ints are acceptable floats, numpy scalars are acceptable too
            if isinstance(value, bool) and expected in (int, float):
                return False
            if expected is float:
                return isinstance(value, numbers.Real)
            if expected is int:
                return isinstance(value, numbers.Integral)
            return isinstance(value, expected)

        def type_check(kwargs: Dict[str, Any], *, run_name: str) -> None:
            """Validates inputs against the declared types.

            Raises:
                TypeError: If an argument fails type validation.
            """

            input_specs = self._inputs_for_run.get(run_name, {})
            for pname, value in kwargs.items():
                expected = input_specs.get(pname, {}).get('type')
                if not isinstance(expected, type) or value is None:
                    continue
                if issubclass(expected, Distribution) and not isinstance(value, expected):
                    raise TypeError(
                        f"Argument '{pname}' must be a {expected.__name__}; got {type(value).__name__}"
                    )
                if not _matches(value, expected):
                    raise TypeError(
                        f"Argument '{pname}' expected {expected.__name__}; got {type(value).__name__}"
                    )

        _autofill_inputs_from_signature(f, run_name)

        @functools.wraps(f)
        def wrapper(**kwargs):
            """Executes the registered run function with input validation."""
            _ensure_dependencies_available()

            # 1) validating inputs against the per-run schema
            user_kwargs = _ensure_inputs_satisfied(kwargs, run_name=run_name)

            # 2) type checking on inputs only
            type_check(user_kwargs, run_name=run_name)

            logger.debug("%s.%s called with inputs %s", type(self).__name__, run_name, sorted(user_kwargs))
            return f(**user_kwargs)

        pr_annot = task if as_task else flow
        pf = pr_annot(name=f"{type(self).__name__}.{run_name}")(wrapper)

        # Register and assign as attribute for direct call
        self._run_funcs[run_name] = pf
        setattr(self, run_name, pf)
        return pf

    def __repr__(self):
        """Return a compact summary representation of the module."""
        return f"<{type(self).__name__} deps={list(self.dependencies.keys())} inputs={list(self.inputs.keys())} run_funcs={list(self._run_funcs.keys())}>"

    def __str__(self):
        """Return a human-readable, multi-line summary of the module configuration."""
        deps = ", ".join(self.dependencies.keys()) or "None"
        inputs = ", ".join(self.inputs.keys()) or "None"
        run_funcs = ", ".join(self._run_funcs.keys()) or "None"
        return f"{type(self).__name__}:\n  Dependencies: {deps}\n  Inputs: {inputs}\n  Run Functions: {run_funcs}"
