"""Tests for dataguardian.analysis.network_graph."""

from __future__ import annotations

from dataguardian.analysis import network_graph
from tests import fakes

TRACKERS = ["www.google-analytics.com", "static.example.com", "connect.facebook.net"]


class TestBuildNetworkGraph:

    def test_star_shape(self) -> None:
        record = fakes.make_record("https://www.example.com", trackers=TRACKERS, score=52, category="Moderate")
        graph = network_graph.build_network_graph(record)

        site_node = graph.nodes[0]
        assert (site_node.id, site_node.type, site_node.label) == ("https://www.example.com", "site", "www.example.com")
        assert (site_node.score, site_node.category) == (52, "Moderate")
        assert [n.id for n in graph.nodes[1:]] == TRACKERS
        assert all(link.source == "https://www.example.com" for link in graph.links)
        assert [link.target for link in graph.links] == TRACKERS

    def test_link_type_is_tracker_category(self) -> None:
        record = fakes.make_record("https://www.example.com", trackers=TRACKERS)
        graph = network_graph.build_network_graph(record)
        assert [link.type for link in graph.links] == ["Analytics", "First-Party/Analytics", "Advertising"]
        assert graph.category_counts == {"analytics": 2, "advertising": 1, "social": 0, "other": 0}

    def test_stored_classification_preferred(self) -> None:
        summary = fakes.make_ai_summary(trackers=TRACKERS)
        record = fakes.make_record("https://www.example.com", trackers=TRACKERS, ai_summary=summary)
        graph = network_graph.build_network_graph(record)
        by_id = {n.id: n for n in graph.nodes}
        assert by_id["www.google-analytics.com"].label == "Google Analytics"
        assert by_id["connect.facebook.net"].company == "Meta"

    def test_unknown_stored_classification_is_rederived(self) -> None:
        summary = fakes.make_ai_summary(trackers=TRACKERS)
        assert summary.tracker_details[1].category == "Unknown"
        record = fakes.make_record("https://www.example.com", trackers=TRACKERS, ai_summary=summary)
        graph = network_graph.build_network_graph(record)
        assert graph.nodes[2].category == "First-Party/Analytics"

    def test_no_trackers(self) -> None:
        graph = network_graph.build_network_graph(fakes.make_record())
        assert len(graph.nodes) == 1
        assert graph.links == []
