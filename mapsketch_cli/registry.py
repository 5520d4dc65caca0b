"""
StepRegistry - Explicit step registration pattern

Bounded Context: Replay step registration and validation
Responsibilities:
  - Register replay steps with handlers
  - Validate step existence and arity before execution
  - Provide introspection (available_steps, get_help)

Pattern: Registry with explicit registration
"""

from typing import Any, Callable, Dict, Set


class StepNotAvailableError(Exception):
    """Raised when a script uses a step that was never registered"""
    pass


class StepRegistry:
    """
    Registry of replay steps with explicit registration.

    Example:
        registry = StepRegistry()
        registry.register('cancel', engine.cancel, "Discard the current session")
        registry.register('click', on_click, "Primary click", takes_argument=True)

        try:
            registry.execute('cancel')
        except StepNotAvailableError as e:
            print(f"Step not available: {e}")
    """

    def __init__(self):
        self._steps: Dict[str, Callable] = {}
        self._descriptions: Dict[str, str] = {}
        self._takes_argument: Dict[str, bool] = {}

    def register(
        self,
        step: str,
        handler: Callable,
        description: str,
        takes_argument: bool = False
    ) -> None:
        """
        Register a step with its handler function.

        Args:
            takes_argument: True if the handler is called with the step's data,
                False if it is called with no arguments

        Raises:
            ValueError: If step already registered (double registration)
        """
        if step in self._steps:
            raise ValueError(f"Step '{step}' already registered")

        self._steps[step] = handler
        self._descriptions[step] = description
        self._takes_argument[step] = takes_argument

    def check(self, step: str, step_data: Any = None) -> None:
        """
        Validate a step without running it.

        Raises:
            StepNotAvailableError: If step not registered
            ValueError: If the argument is missing or unexpected
        """
        if not self.is_available(step):
            raise StepNotAvailableError(
                f"Step '{step}' not available. "
                f"Available steps: {', '.join(sorted(self.available_steps))}"
            )
        if self._takes_argument[step] and step_data is None:
            raise ValueError(f"Step '{step}' needs an argument")
        if not self._takes_argument[step] and step_data is not None:
            raise ValueError(f"Step '{step}' takes no argument, got {step_data!r}")

    def execute(self, step: str, step_data: Any = None) -> Any:
        """
        Execute a registered step.

        Args:
            step: Step name to execute
            step_data: Argument for steps that take one (coordinates, delta, ids, ...)

        Raises:
            StepNotAvailableError: If step not registered
            ValueError: If the argument is missing or unexpected
        """
        self.check(step, step_data)

        handler = self._steps[step]
        if self._takes_argument[step]:
            return handler(step_data)
        return handler()

    def is_available(self, step: str) -> bool:
        return step in self._steps

    @property
    def available_steps(self) -> Set[str]:
        return set(self._steps.keys())

    def get_help(self) -> Dict[str, str]:
        return dict(self._descriptions)

    def count(self) -> int:
        return len(self._steps)
