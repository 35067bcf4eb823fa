"""Graph workflow definition."""

from pydantic_graph import Graph

from claude_mergetool.core.config import State
from claude_mergetool.core.log import logger


def create_workflow():
    """Create the merge workflow graph.

    ResolveMode -> BuildContext -> ComposePrompt -> RunResolver ->
        Deliver -> End[RunOutcome]

    Any stage may raise a MergeToolError, which ends the run.

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building workflow graph")

    # Import nodes (lazy to avoid circular imports)
    from claude_mergetool.workflow.nodes.build_context import BuildContext
    from claude_mergetool.workflow.nodes.compose_prompt import ComposePrompt
    from claude_mergetool.workflow.nodes.deliver import Deliver
    from claude_mergetool.workflow.nodes.resolve_mode import ResolveMode
    from claude_mergetool.workflow.nodes.run_resolver import RunResolver

    workflow = Graph(
        nodes=(
            ResolveMode,
            BuildContext,
            ComposePrompt,
            RunResolver,
            Deliver,
        ),
        state_type=State
    )

    return workflow
