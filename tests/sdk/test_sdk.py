import asyncio

import pytest

from garden_sdk import GardenConfig, Workshop, create_workshop
from garden_session import SessionImportError, SessionRegistry, tree_issues
from garden_suggest import (
    DEFAULT_REFLECTION,
    ClusterSuggestion,
    ClusterSuggestions,
    Idea,
    IdeaSplit,
    LLMSuggestionAdapter,
    OfflineSuggestionAdapter,
    VaguenessCheck,
)


class StubAdapter:
    """Adapter double with fixed answers that records what it was asked."""

    def __init__(self, ideas=None, clusters=None, delay=0.0):
        self.ideas = ideas
        self.clusters = clusters or []
        self.delay = delay
        self.depths = []
        self.cluster_calls = 0

    async def split_ideas(self, text):
        await asyncio.sleep(self.delay)
        texts = self.ideas or [text]
        return IdeaSplit(ideas=[Idea(text=item) for item in texts])

    async def check_vagueness(self, text):
        return VaguenessCheck(is_vague=False)

    async def follow_up(self, text, depth):
        self.depths.append(depth)
        return f"Why {text}? ({depth})"

    async def suggest_clusters(self, nodes):
        self.cluster_calls += 1
        await asyncio.sleep(self.delay)
        return ClusterSuggestions(clusters=self.clusters)

    async def reflect(self, session):
        return f"{len(session.nodes)} causes explored"


def seeded(adapter=None):
    workshop = Workshop(adapter or StubAdapter())
    session = workshop.create_session("Why do we ship late?", "Fay", "We ship late")
    return workshop, session, session.nodes[0]


def test_create_session_seeds_facilitator_root():
    workshop = Workshop(OfflineSuggestionAdapter())
    session = workshop.create_session("Title", "Fay", "  Root question  ")
    assert len(session.nodes) == 1
    root = session.nodes[0]
    assert root.text == "Root question"
    assert root.author_id == "facilitator"
    assert root.level == 0
    assert session.root_node_id == root.id
    assert workshop.get_session(session.id) is session


def test_create_session_without_seed_is_empty():
    workshop = Workshop(OfflineSuggestionAdapter())
    session = workshop.create_session(None, None, "   ")
    assert session.nodes == []
    assert session.root_node_id is None
    assert workshop.list_sessions() == [session]


@pytest.mark.asyncio
async def test_add_response_single_idea_keeps_original_text():
    workshop, session, root = seeded(StubAdapter())
    nodes = await workshop.add_response(session.id, "  Reviews wait days ", root.id)
    assert [node.text for node in nodes] == ["Reviews wait days"]
    assert nodes[0].level == 1
    assert nodes[0].parent_id == root.id
    assert root.children == [nodes[0].id]


@pytest.mark.asyncio
async def test_add_response_adds_one_node_per_idea():
    workshop, session, root = seeded(StubAdapter(ideas=["No reviewers", "Flaky tests"]))
    nodes = await workshop.add_response(session.id, "No reviewers and flaky tests", root.id)
    assert [node.text for node in nodes] == ["No reviewers", "Flaky tests"]
    assert all(node.level == 1 for node in nodes)


@pytest.mark.asyncio
async def test_add_response_unknown_parent_becomes_parentless():
    workshop, session, root = seeded()
    nodes = await workshop.add_response(session.id, "Stray thought here", "node_missing")
    assert nodes[0].parent_id is None
    assert nodes[0].level == 0
    assert session.root_node_id == root.id


@pytest.mark.asyncio
async def test_add_response_ignores_blank_text_and_missing_session():
    workshop, session, root = seeded()
    assert await workshop.add_response(session.id, "   ", root.id) == []
    assert await workshop.add_response("session_missing", "text", None) == []
    assert len(session.nodes) == 1


@pytest.mark.asyncio
async def test_create_nodes_skips_blanks_and_checks_parent():
    workshop, session, root = seeded()
    nodes = await workshop.create_nodes(session.id, ["One", "  ", "Two"], root.id)
    assert [node.text for node in nodes] == ["One", "Two"]

    assert await workshop.create_nodes(session.id, ["Orphan"], "node_missing") == []
    assert len(session.nodes) == 3

    single = await workshop.add_node(session.id, "Three", nodes[0].id)
    assert single.level == 2


@pytest.mark.asyncio
async def test_analyze_response_uses_parent_depth():
    adapter = StubAdapter(ideas=["a thing", "another thing"])
    workshop, session, root = seeded(adapter)
    child = (await workshop.create_nodes(session.id, ["Child"], root.id))[0]

    analysis = await workshop.analyze_response(session.id, "a thing and another thing", child.id)
    assert analysis.parent_id == child.id
    assert analysis.split.idea_count == 2
    assert analysis.vagueness.is_vague is False
    assert analysis.follow_up_question.endswith("(2)")

    analysis = await workshop.analyze_response(session.id, "top level", None)
    assert analysis.parent_id is None
    assert adapter.depths[-1] == 0
    assert len(session.nodes) == 2

    assert await workshop.analyze_response(session.id, "  ", None) is None


@pytest.mark.asyncio
async def test_deepen_node_logs_prompt_for_participants():
    workshop, session, root = seeded()
    child = (await workshop.create_nodes(session.id, ["Child"], root.id))[0]

    log = await workshop.deepen_node(session.id, child.id)
    assert log.node_id == child.id
    assert log.prompt_text == "Why Child? (1)"

    view = workshop.participant_view(session.id)
    assert view.current_prompt == log.prompt_text
    assert view.current_node_id == child.id
    assert view.recent_nodes[0].id == child.id

    assert await workshop.deepen_node(session.id, "node_missing") is None


@pytest.mark.asyncio
async def test_suggest_clusters_below_threshold_does_not_ask():
    adapter = StubAdapter(clusters=[ClusterSuggestion(label="A", node_indices=[0])])
    workshop, session, root = seeded(adapter)
    await workshop.create_nodes(session.id, ["a", "b", "c"], root.id)

    assert await workshop.suggest_clusters(session.id) == []
    assert adapter.cluster_calls == 0
    assert session.clusters == []


@pytest.mark.asyncio
async def test_suggest_clusters_applies_and_skips_bad_indices():
    adapter = StubAdapter(
        clusters=[
            ClusterSuggestion(label="People", description="Who", node_indices=[1, 2, 99]),
            ClusterSuggestion(label="Process", node_indices=[-1, 3]),
        ]
    )
    workshop, session, root = seeded(adapter)
    await workshop.create_nodes(session.id, ["a", "b", "c", "d"], root.id)

    clusters = await workshop.suggest_clusters(session.id)
    assert [cluster.label for cluster in clusters] == ["People", "Process"]
    assert clusters[0].description == "Who"
    assert [node.cluster_id for node in session.nodes] == [
        None,
        clusters[0].id,
        clusters[0].id,
        clusters[1].id,
        None,
    ]
    assert adapter.cluster_calls == 1


@pytest.mark.asyncio
async def test_suggest_clusters_refresh_replaces_existing():
    adapter = StubAdapter(clusters=[ClusterSuggestion(label="New", node_indices=[0])])
    workshop, session, root = seeded(adapter)
    await workshop.create_nodes(session.id, ["a", "b", "c", "d"], root.id)
    old = await workshop.add_cluster(session.id, "Old")
    await workshop.assign_cluster(session.id, session.nodes[4].id, old.id)

    clusters = await workshop.suggest_clusters(session.id, refresh=True)
    assert [cluster.label for cluster in session.clusters] == ["New"]
    assert session.nodes[4].cluster_id is None
    assert session.nodes[0].cluster_id == clusters[0].id
    assert tree_issues(session) == []


@pytest.mark.asyncio
async def test_suggest_clusters_refresh_keeps_clusters_without_suggestions():
    workshop, session, root = seeded(StubAdapter(clusters=[]))
    await workshop.create_nodes(session.id, ["a", "b", "c", "d"], root.id)
    old = await workshop.add_cluster(session.id, "Old")

    assert await workshop.suggest_clusters(session.id, refresh=True) == []
    assert session.clusters == [old]


@pytest.mark.asyncio
async def test_delete_waits_for_cluster_suggestion():
    adapter = StubAdapter(clusters=[ClusterSuggestion(label="All", node_indices=[0, 1, 2, 3, 4])], delay=0.05)
    workshop, session, root = seeded(adapter)
    children = await workshop.create_nodes(session.id, ["a", "b", "c", "d"], root.id)

    clusters, deleted = await asyncio.gather(
        workshop.suggest_clusters(session.id),
        workshop.delete_node(session.id, children[0].id),
    )
    assert deleted is True
    assert len(session.nodes) == 4
    assert all(node.cluster_id == clusters[0].id for node in session.nodes)


@pytest.mark.asyncio
async def test_concurrent_responses_are_serialized():
    workshop, session, root = seeded(StubAdapter(delay=0.01))
    results = await asyncio.gather(
        *(workshop.add_response(session.id, f"cause number {i}", root.id) for i in range(5))
    )
    assert sum(len(nodes) for nodes in results) == 5
    assert len(root.children) == 5
    assert tree_issues(session) == []


@pytest.mark.asyncio
async def test_cluster_and_agency_operations():
    workshop, session, root = seeded()
    child = (await workshop.create_nodes(session.id, ["Child"], root.id))[0]

    assert await workshop.add_cluster(session.id, "  ") is None
    cluster = await workshop.add_cluster(session.id, "Theme", "#FFFFFF", "desc")
    assert cluster.colour == "#FFFFFF"

    assert await workshop.assign_cluster(session.id, child.id, "cluster_missing") is None
    assert (await workshop.assign_cluster(session.id, child.id, cluster.id)).cluster_id == cluster.id
    assert (await workshop.assign_cluster(session.id, child.id, None)).cluster_id is None

    assert (await workshop.set_agency(session.id, child.id, "high")).agency == "high"
    assert (await workshop.set_agency(session.id, child.id, "extreme")).agency == "high"
    assert await workshop.set_agency(session.id, "node_missing", "low") is None


@pytest.mark.asyncio
async def test_phase_reflection_and_reset():
    workshop, session, root = seeded()
    await workshop.create_nodes(session.id, ["a"], root.id)

    assert (await workshop.update_phase(session.id, "growing")).phase == "growing"
    assert (await workshop.update_phase(session.id, "bogus")).phase == "growing"

    assert await workshop.generate_reflection(session.id) == "2 causes explored"
    assert session.reflection == "2 causes explored"

    await workshop.reset_tree(session.id)
    assert session.nodes == []
    assert session.phase == "seeding"
    assert session.root_node_id is None


@pytest.mark.asyncio
async def test_missing_session_results():
    workshop = Workshop(OfflineSuggestionAdapter())
    assert workshop.dashboard("session_missing") is None
    assert workshop.participant_view("session_missing") is None
    assert await workshop.update_phase("session_missing", "growing") is None
    assert await workshop.delete_node("session_missing", "node") is False
    assert await workshop.reset_tree("session_missing") is None
    assert await workshop.deepen_node("session_missing", "node") is None
    assert await workshop.suggest_clusters("session_missing") == []
    assert await workshop.generate_reflection("session_missing") is None
    assert workshop.export_session("session_missing") is None


@pytest.mark.asyncio
async def test_dashboard_summarises_session():
    workshop, session, root = seeded()
    child = (await workshop.create_nodes(session.id, ["a", "b"], root.id))[0]
    await workshop.create_nodes(session.id, ["a1"], child.id)

    dashboard = workshop.dashboard(session.id)
    assert dashboard.tree.id == root.id
    assert dashboard.stats.total_nodes == 4
    assert dashboard.stats.max_depth == 2
    assert {node.text for node in dashboard.shallow_nodes} == {"b", "a1"}
    assert dashboard.cluster_counts == {}


@pytest.mark.asyncio
async def test_offline_workshop_reflection_fallback():
    workshop = Workshop(OfflineSuggestionAdapter())
    session = workshop.create_session("t", "f", "seed")
    assert await workshop.generate_reflection(session.id) == DEFAULT_REFLECTION


def test_export_import_and_sample():
    workshop = Workshop(OfflineSuggestionAdapter())
    session = workshop.create_session("Export me", "Fay", "Root")

    imported = workshop.import_session(workshop.export_session(session.id))
    assert imported.id != session.id
    assert imported.title == "Export me (imported)"
    assert len(workshop.list_sessions()) == 2

    with pytest.raises(SessionImportError):
        workshop.import_session("{broken")
    assert len(workshop.list_sessions()) == 2

    sample = workshop.load_sample_session()
    assert workshop.get_session(sample.id) is sample
    assert len(sample.nodes) == 12


def test_create_workshop_picks_adapter():
    offline = create_workshop(GardenConfig(api_key=None))
    assert isinstance(offline.adapter, OfflineSuggestionAdapter)

    online = create_workshop(GardenConfig(api_key="sk-test", adapter_timeout=5.0))
    assert isinstance(online.adapter, LLMSuggestionAdapter)
    assert online.adapter.policy.timeout == 5.0

    registry = SessionRegistry()
    custom = create_workshop(GardenConfig(), adapter=StubAdapter(), registry=registry)
    assert custom.registry is registry
    assert isinstance(custom.adapter, StubAdapter)


def test_create_workshop_resolves_unregistered_provider_models():
    workshop = create_workshop(
        GardenConfig(provider="local", model_id="llama", base_url="http://localhost:8080/v1", api_key="k")
    )
    model = workshop.adapter._model
    assert model.provider == "local"
    assert model.base_url == "http://localhost:8080/v1"


def test_workshop_uses_empty_injected_registry():
    registry = SessionRegistry()
    workshop = Workshop(OfflineSuggestionAdapter(), registry)
    assert workshop.registry is registry

    session = workshop.create_session("Shared", "Fay")
    assert registry.get(session.id) is session

    via_factory = create_workshop(GardenConfig(), adapter=OfflineSuggestionAdapter(), registry=SessionRegistry())
    created = via_factory.create_session("Also shared")
    assert via_factory.registry.get(created.id) is created


@pytest.mark.asyncio
async def test_remove_session_drops_session_and_lock():
    workshop, session, root = seeded()
    await workshop.create_nodes(session.id, ["a"], root.id)
    assert session.id in workshop._locks

    assert workshop.remove_session(session.id) is session
    assert session.id not in workshop._locks
    assert workshop.get_session(session.id) is None
    assert await workshop.create_nodes(session.id, ["b"], None) == []
    assert session.id not in workshop._locks
    assert workshop.remove_session(session.id) is None
