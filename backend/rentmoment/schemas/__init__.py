"""
Pydantic request/response contracts.

Schemas are kept separate from the SQLAlchemy models: the API speaks
camelCase JSON and never exposes internal columns such as password hashes.
"""
