"""Domain layer for finledger.

Services are imported from their modules directly (for example
``finledger.domain.journal``) so that the database layer can depend on
``finledger.domain.entities`` without import cycles.
"""
