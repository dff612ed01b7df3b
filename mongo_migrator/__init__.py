"""
Mongo Collection Migration Tool

An interactive tool that copies collections from one MongoDB server to
another with mongoexport/mongoimport, keeping the export files as backups
when asked to.
"""

from .migrator import CollectionMigrator, MigrationState
from .models import AnswerSet, Domain, MigrationConfig, Question

__all__ = ['CollectionMigrator', 'MigrationState', 'AnswerSet', 'Domain', 'MigrationConfig', 'Question']
