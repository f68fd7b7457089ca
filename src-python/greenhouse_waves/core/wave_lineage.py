"""
Copyright 2026 greenhouse-waves authors and contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .wave import Wave


class WaveLineage:
    """
    Tracks which wave produced which through cloud reflection, atmosphere
    re-emission and glacier reflection.

    Waves stay registered after they leave the model, so the history of a
    run can be inspected once it is done.

    Usage:
        lineage = model.wave_collection.lineage
        path = lineage.get_full_path(some_wave.uuid)
        graph = lineage.to_networkx()  # requires networkx
    """

    def __init__(self) -> None:
        self._parents: Dict[str, Optional[str]] = {}
        self._children: Dict[str, List[str]] = {}
        self._waves: Dict[str, 'Wave'] = {}

    def register(self, wave: 'Wave') -> None:
        """
        Register a wave.

        Args:
            wave: A Wave with uuid, parent_uuid and interaction_type set.
        """
        self._waves[wave.uuid] = wave
        self._parents[wave.uuid] = wave.parent_uuid
        self._children.setdefault(wave.uuid, [])
        if wave.parent_uuid:
            self._children.setdefault(wave.parent_uuid, []).append(wave.uuid)

    def clear(self) -> None:
        self._parents.clear()
        self._children.clear()
        self._waves.clear()

    @property
    def wave_count(self) -> int:
        return len(self._waves)

    def get_wave(self, uuid: str) -> Optional['Wave']:
        return self._waves.get(uuid)

    def get_ancestors(self, uuid: str) -> List['Wave']:
        """
        All waves in the chain back to the source wave, ordered root-first.

        Does not include the wave itself.
        """
        result = []
        current = self._parents.get(uuid)
        while current is not None:
            wave = self._waves.get(current)
            if wave is None:
                break
            result.append(wave)
            current = self._parents.get(current)
        result.reverse()
        return result

    def get_full_path(self, uuid: str) -> List['Wave']:
        """Chain from the source wave to this wave (inclusive), root-first."""
        wave = self._waves.get(uuid)
        if wave is None:
            return []
        return self.get_ancestors(uuid) + [wave]

    def get_children(self, uuid: str) -> List['Wave']:
        return [self._waves[child] for child in self._children.get(uuid, []) if child in self._waves]

    def get_roots(self) -> List['Wave']:
        """All waves produced by a wave source."""
        return [self._waves[uuid] for uuid, parent in self._parents.items() if parent is None]

    def get_waves_by_type(self, interaction_type: str) -> List['Wave']:
        return [wave for wave in self._waves.values() if wave.interaction_type == interaction_type]

    def get_lineage_statistics(self) -> Dict[str, Any]:
        """
        Summary of the lineage.

        Returns:
            Dict with keys:
            - wave_count: total registered waves
            - root_count: number of waves made by a source
            - interaction_counts: dict mapping interaction_type -> count
        """
        interaction_counts: Dict[str, int] = {}
        for wave in self._waves.values():
            interaction_counts[wave.interaction_type] = interaction_counts.get(wave.interaction_type, 0) + 1
        return {
            'wave_count': len(self._waves),
            'root_count': len(self.get_roots()),
            'interaction_counts': interaction_counts,
        }

    def to_networkx(self) -> Any:
        """
        Export to a NetworkX DiGraph.

        Requires networkx to be installed (the 'graph' extra). Each node is a
        wave uuid with 'interaction' as a node attribute. Edges go from parent
        to child.

        Returns:
            nx.DiGraph

        Raises:
            ImportError: if networkx is not installed
        """
        import networkx as nx
        graph = nx.DiGraph()
        for uuid, wave in self._waves.items():
            graph.add_node(uuid, interaction=wave.interaction_type)
        for uuid, parent in self._parents.items():
            if parent is not None:
                graph.add_edge(parent, uuid)
        return graph

    def __repr__(self) -> str:
        return f"WaveLineage(waves={len(self._waves)}, roots={len(self.get_roots())})"
