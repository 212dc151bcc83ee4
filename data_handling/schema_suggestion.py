"""
Schema-suggestion collaborator interface for Data Fusion.

The column mappings that drive normalization are produced outside this
package, usually by an LLM-backed service. This module defines the request
payload sent to such a collaborator, the validated shape of its answer, and
the error policy: any failure is a hard failure because merging cannot
proceed without a mapping.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from core.exceptions import CollaboratorError, ValidationError

from .models import ColumnMapping, Dataset, MergeStrategy

logger = logging.getLogger(__name__)


@dataclass
class SchemaSuggestion:
    """Validated answer of a schema-suggestion collaborator."""
    mappings: Dict[str, List[ColumnMapping]]
    common_identifiers: List[str] = field(default_factory=list)
    merge_strategy: MergeStrategy = MergeStrategy.OUTER_JOIN
    reasoning: str = ''
    target_schema: List[str] = field(default_factory=list)

    @property
    def identifier_column(self):
        """The preferred join key, if the collaborator named one."""
        return self.common_identifiers[0] if self.common_identifiers else None

    def to_dict(self) -> dict:
        return {
            'mappings': {ds_id: [m.to_dict() for m in ms] for ds_id, ms in self.mappings.items()},
            'common_identifiers': list(self.common_identifiers),
            'merge_strategy': self.merge_strategy.value,
            'reasoning': self.reasoning,
            'target_schema': list(self.target_schema),
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'SchemaSuggestion':
        """
        Validate a collaborator payload.

        Accepts the collaborator's camelCase keys (commonIdentifiers,
        mergeStrategy, targetSchema) as well as snake_case.

        Raises:
            ValidationError: If the payload shape is invalid
        """
        if not isinstance(data, dict):
            raise ValidationError("Schema suggestion must be an object", value=type(data).__name__)

        raw_mappings = data.get('mappings')
        if not isinstance(raw_mappings, dict):
            raise ValidationError("Schema suggestion requires a mappings object", field='mappings')

        mappings = {}
        for dataset_id, entries in raw_mappings.items():
            if not isinstance(entries, list):
                raise ValidationError("Mappings must be lists", field=f"mappings.{dataset_id}")
            mappings[str(dataset_id)] = [ColumnMapping.from_dict(entry) for entry in entries]

        common_identifiers = data.get('common_identifiers', data.get('commonIdentifiers', []))
        target_schema = data.get('target_schema', data.get('targetSchema', []))
        for name, value in (('common_identifiers', common_identifiers), ('target_schema', target_schema)):
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise ValidationError("Expected a list of column names", field=name)

        reasoning = data.get('reasoning', '')
        if not isinstance(reasoning, str):
            raise ValidationError("Reasoning must be a string", field='reasoning')

        strategy = data.get('merge_strategy', data.get('mergeStrategy', MergeStrategy.OUTER_JOIN.value))

        return cls(
            mappings=mappings,
            common_identifiers=list(common_identifiers),
            merge_strategy=MergeStrategy.parse(strategy),
            reasoning=reasoning,
            target_schema=list(target_schema)
        )


class SchemaSuggester(ABC):
    """Abstract collaborator that proposes column mappings for datasets."""

    @abstractmethod
    def suggest(self, requests: List[dict]) -> dict:
        """
        Propose mappings for the described datasets.

        Args:
            requests: One payload per dataset, see build_suggestion_request

        Returns:
            Raw payload with mappings, commonIdentifiers, mergeStrategy,
            reasoning and targetSchema
        """
        pass


def build_suggestion_request(dataset: Dataset, sample_size: int = 5) -> dict:
    """Describe one dataset for a schema-suggestion collaborator."""
    return {
        'id': dataset.id,
        'name': dataset.name,
        'headers': list(dataset.headers),
        'sampleRows': [dict(row) for row in dataset.rows[:sample_size]],
        'columnProfiles': [profile.to_dict() for profile in dataset.column_profiles],
    }


def request_schema_suggestion(
    suggester: SchemaSuggester,
    datasets: Sequence[Dataset],
    sample_size: int = 5
) -> SchemaSuggestion:
    """
    Ask the collaborator for mappings and validate its answer.

    Raises:
        CollaboratorError: If the collaborator fails or returns a malformed payload
    """
    requests = [build_suggestion_request(ds, sample_size) for ds in datasets]
    collaborator = type(suggester).__name__

    try:
        payload = suggester.suggest(requests)
    except Exception as e:
        logger.error(f"Schema suggestion failed in {collaborator}: {e}")
        raise CollaboratorError("Failed to generate schema mappings", collaborator=collaborator, cause=e)

    try:
        suggestion = SchemaSuggestion.from_dict(payload)
    except ValidationError as e:
        logger.error(f"Malformed schema suggestion from {collaborator}: {e}")
        raise CollaboratorError("Schema suggestion payload is invalid", collaborator=collaborator, cause=e)

    logger.info(
        f"Received schema suggestion for {len(suggestion.mappings)} datasets "
        f"(strategy {suggestion.merge_strategy.value}, {len(suggestion.target_schema)} target columns)"
    )
    return suggestion
