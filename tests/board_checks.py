"""
Shared invariant checks for board tests.
"""

import networkx as nx

from hashi.core.validator import PuzzleValidator


def snapshot(board):
    """(bridges, to_give) per river"""
    return [(r.bridges, r.to_give) for r in board.rivers]


def assert_invariants(test, board):
    """Check bookkeeping that must hold at all times."""
    for island in board.islands:
        test.assertEqual(island.bridges, sum(board.rivers[r].bridges for r in island.rivers))
        live = [r for r in island.rivers if board.rivers[r].to_give > 0]
        test.assertEqual(island.live_rivers, live)
        test.assertEqual(island.available, sum(board.rivers[r].to_give for r in live))

    for river in board.rivers:
        test.assertGreaterEqual(river.to_give, 0)
        test.assertLessEqual(river.to_give, river.max_bridges - river.bridges)
        if river.bridges > 0:
            for crossing_id in river.crossings:
                test.assertEqual(board.rivers[crossing_id].bridges, 0)
                test.assertEqual(board.rivers[crossing_id].to_give, 0)

    # Clusters exactly partition the islands
    seen = []
    for cluster in board.clusters:
        seen.extend(cluster.members)
        for island_id in cluster.members:
            test.assertEqual(board.islands[island_id].cluster, cluster.id)
    test.assertEqual(sorted(seen), [i.id for i in board.islands])

    graph = PuzzleValidator.bridge_graph(board)
    components = sorted(sorted(c) for c in nx.connected_components(graph))
    clusters = sorted(sorted(c.members) for c in board.clusters)
    test.assertEqual(components, clusters)
