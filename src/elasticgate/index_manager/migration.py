"""结构迁移协调器.

更新逻辑索引的字段定义：别名未绑定时直接创建；已绑定时先尝试原地更新映射，
集群拒绝后重建索引（reindex），再用一次别名操作原子切换，最后删除旧索引。

状态流转::

    RESOLVING -> CREATE_NEW -> DONE
    RESOLVING -> TRY_INPLACE_UPDATE -> DONE
    RESOLVING -> TRY_INPLACE_UPDATE -> REINDEX -> SWAP_ALIAS -> RETIRE_OLD -> DONE
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import Any, Iterator

from elasticsearch import ApiError, Elasticsearch

from ..exceptions import from_engine_error
from .exceptions import IndexManagerError
from .mapping import build_properties
from .models import FieldSchema, MigrationOutcome, MigrationResult, MigrationState
from .provisioner import IndexProvisioner
from .resolver import AliasResolver

logger = logging.getLogger(__name__)


class NamedLockRegistry:
    """按逻辑索引名分配的进程内互斥锁.

    同一逻辑索引的创建、更新、删除串行执行，不同逻辑索引互不影响。
    锁按持有者计数，最后一个持有者释放后即移除。
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._holders: dict[str, int] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _acquire_entry(self, name: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = self._locks[name] = threading.Lock()
            self._holders[name] = self._holders.get(name, 0) + 1
            return lock

    def _release_entry(self, name: str) -> None:
        with self._guard:
            self._holders[name] -= 1
            if self._holders[name] == 0:
                del self._holders[name]
                del self._locks[name]

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        lock = self._acquire_entry(name)
        try:
            with lock:
                yield
        finally:
            self._release_entry(name)


class SchemaMigrationCoordinator:
    """结构迁移协调器.

    Attributes:
        es_client: Elasticsearch 客户端
        resolver: 别名解析器
        provisioner: 索引创建器
        locks: 逻辑索引名互斥锁，None 表示不串行化
        reindex_timeout: reindex 请求超时时间（秒），None 表示使用客户端默认值

    Examples:
        >>> coordinator = SchemaMigrationCoordinator(es_client, resolver, provisioner)
        >>> result = coordinator.update("products", fields)
        >>> result.outcome
        <MigrationOutcome.REINDEXED: 'reindexed'>
    """

    def __init__(
        self,
        es_client: Elasticsearch,
        resolver: AliasResolver,
        provisioner: IndexProvisioner,
        locks: NamedLockRegistry | None = None,
        reindex_timeout: float | None = None,
    ):
        self.es_client = es_client
        self.resolver = resolver
        self.provisioner = provisioner
        self.locks = locks
        self.reindex_timeout = reindex_timeout

    def guard(self, alias: str):
        """返回逻辑索引名对应的互斥上下文."""
        if self.locks is None:
            return nullcontext()
        return self.locks.hold(alias)

    def update(self, alias: str, fields: dict[str, FieldSchema]) -> MigrationResult:
        """更新逻辑索引的字段定义，别名不存在时创建.

        Args:
            alias: 逻辑索引名
            fields: 新的字段定义

        Returns:
            迁移结果

        Raises:
            ElasticGateError: 创建、重建或别名切换失败时抛出，此时别名仍指向原索引
        """
        with self.guard(alias):
            return self._migrate(alias, fields)

    def _migrate(self, alias: str, fields: dict[str, FieldSchema]) -> MigrationResult:
        states = [MigrationState.RESOLVING]
        current = self.resolver.try_resolve(alias)

        if current is None:
            states.append(MigrationState.CREATE_NEW)
            index = self.provisioner.create(alias, fields)
            states.append(MigrationState.DONE)
            return MigrationResult(
                alias=alias,
                physical_index=index,
                outcome=MigrationOutcome.CREATED,
                states=states,
            )

        states.append(MigrationState.TRY_INPLACE_UPDATE)
        if self._try_inplace_update(current, fields):
            states.append(MigrationState.DONE)
            logger.info(f"索引 '{current}' 映射已原地更新")
            return MigrationResult(
                alias=alias,
                physical_index=current,
                outcome=MigrationOutcome.UPDATED_IN_PLACE,
                states=states,
            )

        states.append(MigrationState.REINDEX)
        target = self.provisioner.create_unbound(alias, fields)
        try:
            self._reindex(current, target)
            states.append(MigrationState.SWAP_ALIAS)
            self._swap_alias(alias, current, target)
        except Exception:
            self._discard(target)
            raise

        result = MigrationResult(
            alias=alias,
            physical_index=target,
            outcome=MigrationOutcome.REINDEXED,
            previous_index=current,
            states=states,
        )

        states.append(MigrationState.RETIRE_OLD)
        try:
            self.es_client.indices.delete(index=current)
            logger.info(f"旧索引 '{current}' 已删除")
        except Exception as e:
            # 别名已切换，旧索引成为孤儿索引，需人工清理
            logger.warning(f"删除旧索引 '{current}' 失败，需人工清理: {e}")
            result.degraded = True
            result.warnings.append(f"old index {current} could not be removed: {e}")

        states.append(MigrationState.DONE)
        return result

    def _try_inplace_update(self, index: str, fields: dict[str, FieldSchema]) -> bool:
        try:
            self.es_client.indices.put_mapping(
                index=index, properties=build_properties(fields)
            )
        except ApiError as e:
            logger.warning(f"索引 '{index}' 映射原地更新被拒绝，转为重建索引: {e}")
            return False
        except Exception as e:
            raise from_engine_error(e, "failed to update index mappings") from e
        return True

    def _reindex(self, source: str, dest: str) -> None:
        client = self.es_client
        if self.reindex_timeout is not None:
            client = client.options(request_timeout=self.reindex_timeout)

        logger.info(f"开始重建索引: '{source}' -> '{dest}'")
        try:
            response: Any = client.reindex(
                source={"index": source},
                dest={"index": dest},
                wait_for_completion=True,
                refresh=True,
            )
        except Exception as e:
            logger.error(f"重建索引 '{source}' -> '{dest}' 失败: {e}")
            raise from_engine_error(e, "failed to reindex data") from e

        response = getattr(response, "body", response)
        failures = response.get("failures") or []
        if failures:
            logger.error(f"重建索引 '{source}' -> '{dest}' 存在 {len(failures)} 条失败")
            raise IndexManagerError(
                "failed to reindex data",
                details=f"{len(failures)} documents failed: {failures[0]}",
            )
        logger.info(f"重建索引完成: '{source}' -> '{dest}'，共 {response.get('total', 0)} 条文档")

    def _swap_alias(self, alias: str, old_index: str, new_index: str) -> None:
        try:
            self.es_client.indices.update_aliases(
                actions=[
                    {"remove": {"index": old_index, "alias": alias}},
                    {"add": {"index": new_index, "alias": alias}},
                ]
            )
        except Exception as e:
            logger.error(f"别名 '{alias}' 切换到 '{new_index}' 失败: {e}")
            raise from_engine_error(e, "failed to update alias") from e
        logger.info(f"别名 '{alias}' 已从 '{old_index}' 切换到 '{new_index}'")

    def _discard(self, index: str) -> None:
        try:
            self.es_client.indices.delete(index=index)
            logger.warning(f"迁移失败，已回滚目标索引 '{index}'")
        except Exception as e:
            logger.error(f"回滚目标索引 '{index}' 失败: {e}")
