"""Sub-agents: nested conversations supervised by a parent."""

from skein.subagents.models import SubAgentInstance, SubAgentStartResult, SubAgentStatus
from skein.subagents.supervisor import SubAgentSupervisor, default_subagent_config

__all__ = [
    "SubAgentInstance",
    "SubAgentStartResult",
    "SubAgentStatus",
    "SubAgentSupervisor",
    "default_subagent_config",
]
