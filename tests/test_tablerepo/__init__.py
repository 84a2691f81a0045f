"""
tablerepo Test Suite.

Covers the unit-of-work journal, DomainMappedRepository, both table
storage adapters (shared contract plus backend specifics), filters,
mappers, blob storage, configuration and factory wiring.
"""
