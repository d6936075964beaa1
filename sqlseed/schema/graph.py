"""
Table dependency graph

A table depends on every table its foreign keys reference. Generation must
visit referenced tables first, so the graph has to be acyclic; self
references are not edges here because they are resolved row by row.
"""

import logging
from typing import Dict, List

import networkx as nx

from ..errors import CyclicForeignKeys
from .model import Schema

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Foreign-key dependency graph between the tables of a schema"""

    def __init__(self, schema: Schema):
        self.schema = schema
        self.graph = nx.DiGraph()
        self._positions: Dict[str, int] = {}
        self._build()

    def _build(self):
        for position, table in enumerate(self.schema):
            self._positions[table.name] = position
            self.graph.add_node(table.name)

        # Edges point from the referenced table to the dependent table
        for table in self.schema:
            for fk in table.foreign_keys:
                if fk.is_self_reference(table.name):
                    continue
                self.graph.add_edge(fk.referenced_table, table.name)

    def find_cycle(self) -> List[str]:
        """
        Find one cycle among the tables

        Returns:
            Table names along the cycle in dependency order, or an empty list
        """
        try:
            edges = nx.find_cycle(self.graph)
        except nx.NetworkXNoCycle:
            return []
        # Edges run referenced -> dependent; report the dependent -> referenced direction
        return list(reversed([source for source, _ in edges]))

    def generation_order(self) -> List[str]:
        """
        Order in which tables must be generated

        Referenced tables come before the tables that depend on them; ties are
        broken by declaration order so the result is stable.

        Returns:
            Table names in generation order
        """
        cycle = self.find_cycle()
        if cycle:
            raise CyclicForeignKeys(cycle)

        order = list(nx.lexicographical_topological_sort(
            self.graph, key=lambda name: self._positions[name]
        ))
        logger.debug(f"Generation order: {order}")
        return order

    def dependencies_of(self, table_name: str) -> List[str]:
        """Tables that must be generated before the given table"""
        return sorted(nx.ancestors(self.graph, table_name), key=lambda name: self._positions[name])
