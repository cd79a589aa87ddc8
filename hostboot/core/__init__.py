from .runtime_context import ProvisioningContext, RuntimeContext
from .policy_engine import PolicyEngine, PolicyResult
from .executor import Executor, StepResult
from .kernel import Kernel, ProvisionResult

__all__ = [
  "ProvisioningContext",
  "RuntimeContext",
  "PolicyEngine",
  "PolicyResult",
  "Executor",
  "StepResult",
  "Kernel",
  "ProvisionResult",
]
