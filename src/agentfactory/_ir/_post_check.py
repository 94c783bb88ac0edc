"""Consistency checks over an already produced CompiledService."""

from __future__ import annotations

import logging

from agentfactory._errors import CompileError, ErrorCode
from agentfactory._result import Err, Ok, Result

from ._compiled import CompiledService

logger = logging.getLogger(__name__)


def check_compiled(ir: CompiledService) -> Result[CompiledService]:
    """Check that an IR is internally consistent before handing it to a runtime.

    Not chained after compilation; callers invoke it explicitly, e.g. on an
    IR that was hand-edited or produced by another tool.

    Checks:
    - ``start_agent`` is one of the compiled agents.
    - every ``next_agents`` entry is a compiled agent id. Successors that
      are gates or tools therefore fail this check.

    Returns:
        ``Ok(ir)`` if consistent, otherwise ``Err`` with the first problem
        (``INVALID_START_AGENT`` or ``INVALID_NEXT_AGENT``).

    """
    agent_ids = ir.agent_ids

    if ir.start_agent not in agent_ids:
        return Err(
            CompileError(
                f'Start agent "{ir.start_agent}" not found in compiled agents',
                ErrorCode.INVALID_START_AGENT,
                {"startAgent": ir.start_agent},
            ),
        )

    for agent in ir.agents:
        for next_agent_id in agent.next_agents:
            if next_agent_id not in agent_ids:
                logger.debug("Agent %s has unresolved successor %s", agent.id, next_agent_id)
                return Err(
                    CompileError(
                        f'Agent "{agent.id}" references non-existent next agent "{next_agent_id}"',
                        ErrorCode.INVALID_NEXT_AGENT,
                        {"agentId": agent.id, "nextAgentId": next_agent_id},
                    ),
                )

    return Ok(ir)
