"""Model catalog and the user's model selection."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .config import MODEL_CATALOG, RECOMMENDED_MODELS
from .errors import UnknownModel


@dataclass(frozen=True)
class ModelSpec:
    id: str
    display_name: str
    local: bool = False


class ModelCatalog:
    """Fixed, ordered set of models the form can offer."""

    def __init__(self, specs: Iterable[ModelSpec]):
        self._specs: Dict[str, ModelSpec] = {}
        for spec in specs:
            if spec.id in self._specs:
                raise ValueError(f"Duplicate model id {spec.id!r}")
            self._specs[spec.id] = spec

    @classmethod
    def from_config(cls, entries=MODEL_CATALOG) -> "ModelCatalog":
        return cls(ModelSpec(e['id'], e['name'], e.get('local', False)) for e in entries)

    def __contains__(self, model_id) -> bool:
        return model_id in self._specs

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self):
        return len(self._specs)

    def get(self, model_id: str) -> ModelSpec:
        try:
            return self._specs[model_id]
        except KeyError:
            raise UnknownModel(model_id) from None

    def display_name(self, model_id: str) -> str:
        spec = self._specs.get(model_id)
        return spec.display_name if spec else model_id

    @property
    def ids(self) -> List[str]:
        return list(self._specs)


DEFAULT_CATALOG = ModelCatalog.from_config()


@dataclass(frozen=True)
class ModelSelection:
    """
    Ordered set of unique catalog ids.

    Construction rejects ids that are not in the catalog, so nothing
    outside it can reach the inference service. An empty selection is
    allowed here; submitting it is what fails.
    """
    ids: Tuple[str, ...]
    catalog: ModelCatalog = DEFAULT_CATALOG

    def __post_init__(self):
        unique = []
        for model_id in self.ids:
            if model_id not in self.catalog:
                raise UnknownModel(model_id)
            if model_id not in unique:
                unique.append(model_id)
        object.__setattr__(self, 'ids', tuple(unique))

    @classmethod
    def of(cls, ids: Iterable[str], catalog: Optional[ModelCatalog] = None) -> "ModelSelection":
        return cls(tuple(ids), catalog or DEFAULT_CATALOG)

    @classmethod
    def recommended(cls, catalog: Optional[ModelCatalog] = None) -> "ModelSelection":
        catalog = catalog or DEFAULT_CATALOG
        return cls(tuple(i for i in RECOMMENDED_MODELS if i in catalog), catalog)

    def __contains__(self, model_id) -> bool:
        return model_id in self.ids

    def __iter__(self):
        return iter(self.ids)

    def __len__(self):
        return len(self.ids)

    @property
    def is_empty(self) -> bool:
        return not self.ids

    def toggle(self, model_id: str) -> "ModelSelection":
        if model_id in self.ids:
            return ModelSelection(tuple(i for i in self.ids if i != model_id), self.catalog)
        return ModelSelection(self.ids + (model_id,), self.catalog)

    @property
    def local_ids(self) -> List[str]:
        return [i for i in self.ids if self.catalog.get(i).local]

    @property
    def remote_ids(self) -> List[str]:
        return [i for i in self.ids if not self.catalog.get(i).local]
