"""
Base class for table-specific data access objects.

Subclasses declare the columns they read in ``fields`` and get a ``Router``
whose ``fetch_one``/``fetch_all`` normalize rows against those columns::

    class UserDAO(DAO):
        fields = ["U.us_no", "U.name", "U.ctime"]

        def get(self, us_no):
            sql = self.db.build_select(
                [self.select_fields("U.")], ["users U"], ["U.us_no = ?"]
            )
            return self.db.fetch_one(sql, [us_no])
"""

from typing import Any, Iterable, List, MutableMapping, Optional, Sequence

from cluster_dao.config.settings import Settings, get_settings
from cluster_dao.infrastructure.normalization.record_normalizer import RecordNormalizer
from cluster_dao.infrastructure.sql.operations.select import render_field_list
from cluster_dao.io.router.router import ConnectionCluster, RoleConfig, Router
from cluster_dao.utils.timestamps import resolve_timezone, unix


class DAO:
    """Holds the default field list, its normalizer and a router."""

    fields: Sequence[str] = ()

    def __init__(
        self,
        cluster: ConnectionCluster,
        roles: Optional[RoleConfig] = None,
        fields: Optional[Sequence[str]] = None,
        timezone: Optional[str] = None,
    ):
        if fields is not None:
            self.fields = list(fields)
        self.normalizer = RecordNormalizer(self.fields, tz=resolve_timezone(timezone))
        self.db = Router(cluster, roles, self.normalizer)

    @classmethod
    def from_settings(
        cls,
        cluster: Optional[ConnectionCluster] = None,
        settings: Optional[Settings] = None,
    ) -> "DAO":
        """Create the DAO on the configured cluster, roles and time zone."""
        settings = settings or get_settings()
        if cluster is None:
            from cluster_dao.io.connectors.pool_cluster import PoolCluster

            cluster = PoolCluster.from_settings(settings)
        return cls(
            cluster,
            roles=RoleConfig.from_settings(settings),
            timezone=settings.timezone,
        )

    @staticmethod
    def unix() -> int:
        """Current Unix timestamp, for ``ctime``/``utime`` columns."""
        return unix()

    def select_fields(
        self, prefix: str = "", rename: str = "", fields: Optional[Sequence[str]] = None
    ) -> str:
        """
        Projection for this DAO's fields.

        Example:
            >>> dao.select_fields("U.", "us_", ["us_no", "name"])
            'U.us_no AS us_us_no, U.name AS us_name'
        """
        return render_field_list(prefix, rename, self.fields if fields is None else fields)

    def parse_item(
        self,
        item: MutableMapping[str, Any],
        rename: str = "",
        fields: Optional[Sequence[str]] = None,
        copy: bool = False,
    ) -> dict:
        """Select and rename ``rename``-prefixed columns of a joined row."""
        return self.normalizer.select_and_rename(item, rename, fields, copy)

    def migrate_item(self, item: MutableMapping[str, Any]) -> dict:
        return self.normalizer.normalize(item)

    def migrate(self, items: List[Any]) -> List[Any]:
        return self.normalizer.normalize_many(items)

    def extract(
        self, item: MutableMapping[str, Any], target: str, fields: Iterable[str]
    ) -> MutableMapping[str, Any]:
        """Flatten ``item[target]`` into ``<target>_<field>`` keys."""
        return self.normalizer.split_nested(item, target, fields)

    def merge(
        self, item: MutableMapping[str, Any], target: str, fields: Iterable[str]
    ) -> MutableMapping[str, Any]:
        """Fold ``<target>_<field>`` keys into ``item[target]``."""
        return self.normalizer.merge_nested(item, target, fields)
