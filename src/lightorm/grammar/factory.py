"""Grammar Factory.

This module provides a factory for creating dialect-specific grammars from
a driver name, as found in connection configuration.
"""

from typing import Dict, Type, Union

from lightorm.common.exceptions import unsupported_driver_error
from lightorm.constants.sql import Driver, normalize_driver
from lightorm.grammar.base import Grammar
from lightorm.grammar.mysql import MySqlGrammar
from lightorm.grammar.postgres import PostgresGrammar
from lightorm.grammar.sqlite import SqliteGrammar


class GrammarFactory:
    """Factory for creating dialect-specific grammars.

    Example:
        >>> grammar = GrammarFactory.create("sqlite")
        >>> pg = GrammarFactory.create("postgresql", table_prefix="app_")
    """

    _grammars: Dict[Driver, Type[Grammar]] = {
        Driver.MYSQL: MySqlGrammar,
        Driver.PGSQL: PostgresGrammar,
        Driver.SQLITE: SqliteGrammar,
    }

    @staticmethod
    def create(driver: Union[str, Driver], table_prefix: str = "") -> Grammar:
        """Create the grammar for a driver.

        Args:
            driver: Driver name (mysql, pgsql/postgresql, sqlite)
            table_prefix: Prefix applied to target table names

        Returns:
            Configured grammar instance

        Raises:
            LightORMError: UNSUPPORTED_DRIVER if the driver is unknown
        """
        resolved = normalize_driver(driver.value if isinstance(driver, Driver) else driver)
        if resolved is None:
            raise unsupported_driver_error(str(driver))

        return GrammarFactory._grammars[resolved](table_prefix=table_prefix)


def get_grammar(driver: Union[str, Driver], table_prefix: str = "") -> Grammar:
    """Get a grammar for ``driver``; see :meth:`GrammarFactory.create`."""
    return GrammarFactory.create(driver, table_prefix=table_prefix)
