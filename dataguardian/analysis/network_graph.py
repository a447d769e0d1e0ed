"""Build the site → tracker data-flow graph for a stored analysis."""

from __future__ import annotations

from dataguardian.analysis import classifier
from dataguardian.models import network, site, tracking
from dataguardian.utils import url


def _resolve(
    tracker: str,
    stored: tracking.TrackerClassification | None,
    site_host: str,
) -> tracking.TrackerClassification:
    """Prefer the stored classification, re-deriving it when unknown."""
    if stored is not None and stored.category != "Unknown" and stored.company:
        return stored
    fresh = classifier.classify_for_site(tracker, site_host)
    if stored is None:
        return fresh
    return tracking.TrackerClassification(
        domain=tracker,
        name=stored.name if stored.name and stored.name != tracker else fresh.name,
        category=fresh.category if stored.category == "Unknown" else stored.category,
        company=stored.company or fresh.company,
    )


def build_network_graph(record: site.AnalysisResult) -> network.NetworkGraph:
    """Return the star graph for *record*.

    Nodes keep the record's tracker order.  Tracker nodes reuse the
    classification stored with the AI summary and fall back to the
    root-domain-aware classifier for hostnames stored as ``Unknown``.
    """
    site_host = url.extract_hostname(record.url) or record.url
    stored = {d.domain: d for d in record.ai_summary.tracker_details} if record.ai_summary else {}

    nodes = [
        network.GraphNode(
            id=record.url,
            type="site",
            label=site_host,
            category=record.category,
            score=record.score,
        )
    ]
    links: list[network.GraphLink] = []
    details: list[tracking.TrackerClassification] = []

    for tracker in record.trackers:
        info = _resolve(tracker, stored.get(tracker), site_host)
        details.append(info)
        nodes.append(
            network.GraphNode(
                id=tracker,
                type="tracker",
                label=info.name,
                category=info.category,
                company=info.company or "Unknown",
            )
        )
        links.append(network.GraphLink(source=record.url, target=tracker, type=info.category))

    return network.NetworkGraph(nodes=nodes, links=links, category_counts=classifier.category_counts(details))
