from langgraph.graph import StateGraph, END
from pipeline.state import AnalysisState
from pipeline.nodes import (
    node_validate,
    node_check_config,
    node_vision,
    node_parse,
)


def route_after(next_node):
    """Router factory: stop as soon as a node has produced a response body."""

    def route(state):
        if state.get("body") is not None:
            return END
        return next_node

    return route


def build_graph():
    workflow = StateGraph(AnalysisState)

    # Add all nodes
    workflow.add_node("validate", node_validate)
    workflow.add_node("check_config", node_check_config)
    workflow.add_node("vision", node_vision)
    workflow.add_node("parse", node_parse)

    # Set entry point
    workflow.set_entry_point("validate")

    # Each step either ends the run or hands over to the next one
    workflow.add_conditional_edges(
        "validate",
        route_after("check_config"),
        {"check_config": "check_config", END: END},
    )
    workflow.add_conditional_edges(
        "check_config",
        route_after("vision"),
        {"vision": "vision", END: END},
    )
    workflow.add_conditional_edges(
        "vision",
        route_after("parse"),
        {"parse": "parse", END: END},
    )

    workflow.add_edge("parse", END)

    return workflow.compile()


pipeline = build_graph()
