"""Workflow template cloning."""

import copy
from dataclasses import replace
from datetime import datetime, UTC
from typing import Optional

from planner.domain.entities import ProjectWorkflow, WorkflowTemplate
from planner.utils.ids import new_id


def clone_template_for_project(
    template: WorkflowTemplate, project_name: str, now: Optional[datetime] = None
) -> ProjectWorkflow:
    """Create a project workflow from a template.

    Every node and edge gets a new id, edges are re-pointed at the cloned
    nodes and all nodes start as pending. Mutable node payloads are deep
    copied so the project shares nothing with the template.
    """
    now = now or datetime.now(UTC)
    id_map: dict[str, str] = {}

    nodes = []
    for node in template.nodes:
        node_id = new_id("node")
        id_map[node.id] = node_id
        nodes.append(replace(
            node,
            id=node_id,
            status="pending",
            position=copy.deepcopy(node.position),
            data=copy.deepcopy(node.data),
        ))

    # Group membership points at nodes too
    nodes = [
        replace(n, parent_id=id_map.get(n.parent_id, n.parent_id)) if n.parent_id else n
        for n in nodes
    ]

    edges = tuple(
        replace(
            edge,
            id=new_id("edge"),
            source=id_map.get(edge.source, edge.source),
            target=id_map.get(edge.target, edge.target),
        )
        for edge in template.edges
    )

    return ProjectWorkflow(
        id=new_id("workflow"),
        name=project_name,
        description=template.description,
        template_id=template.id,
        nodes=tuple(nodes),
        edges=edges,
        status="planning",
        progress=0,
        created_at=now,
        updated_at=now,
    )
