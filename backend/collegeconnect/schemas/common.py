"""
Base commune des schémas : le client web échange du JSON en camelCase.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Réponse sérialisée en camelCase, lisible depuis les objets SQLAlchemy."""
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


class CamelRequest(BaseModel):
    """Corps de requête : accepte camelCase (ou snake_case) et refuse les champs inconnus."""
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "forbid"}
