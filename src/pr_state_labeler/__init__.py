"""PR State Labeler.

Applies label rules to a pull request from a single CI webhook event:
- rules loaded from a YAML file
- labels created on demand
- one rule selected from pull request and review state
"""

__version__ = "0.1.0"

from pr_state_labeler.labeler.config import LabelerSettings

__all__ = ["__version__", "LabelerSettings"]
