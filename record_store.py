"""Record Store Client for the Supabase `health_records` table.

Each call is a single round trip. Rows are translated with
`encode_record` / `decode_record` so callers only ever see HealthRecord.
"""

import logging
from typing import List, Optional

from config import Config
from exceptions import StoreError, ValidationError
from models import HealthRecord, SessionContext, decode_record, encode_record

logger = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, table: str = Config.RECORDS_TABLE):
        self.table = table

    def _query(self, ctx: SessionContext):
        if ctx.client is None:
            raise StoreError("未登录，无法访问数据", operation="connect")
        return ctx.client.table(self.table)

    def list(self, ctx: SessionContext) -> List[HealthRecord]:
        query = self._query(ctx)
        try:
            res = (
                query
                .select("*")
                .eq("user_id", ctx.user_id)
                .order("date", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("Error fetching records: %s", e)
            raise StoreError("加载数据失败，请检查网络连接", operation="list", cause=e) from e
        return [decode_record(row) for row in (res.data or [])]

    def create_or_update(self, ctx: SessionContext, record: HealthRecord) -> Optional[HealthRecord]:
        """Upsert on (user_id, date). Returns None when nobody is logged in."""
        if not ctx.is_authenticated:
            logger.warning("create_or_update called without a logged-in user")
            return None
        payload = encode_record(record, user_id=ctx.user_id)
        query = self._query(ctx)
        try:
            res = (
                query
                .upsert(payload, on_conflict="user_id,date")
                .execute()
            )
        except Exception as e:
            logger.error("Error creating/updating record for %s: %s", record.date, e)
            raise StoreError("保存失败，请重试", operation="upsert", cause=e) from e
        if not res.data:
            logger.error("Upsert for %s returned no row", record.date)
            raise StoreError("保存失败，请重试", operation="upsert")
        return decode_record(res.data[0])

    def update(self, ctx: SessionContext, record: HealthRecord) -> HealthRecord:
        if not record.id:
            raise ValidationError("缺少记录编号，无法更新", field="id")
        query = self._query(ctx)
        try:
            res = (
                query
                .update(encode_record(record))
                .eq("id", record.id)
                .execute()
            )
        except Exception as e:
            logger.error("Error updating record %s: %s", record.id, e)
            raise StoreError("保存失败，请重试", operation="update", cause=e) from e
        if not res.data:
            logger.error("Update matched no record with id %s", record.id)
            raise StoreError("记录不存在或已被删除", operation="update")
        return decode_record(res.data[0])

    def delete(self, ctx: SessionContext, record_id: str) -> None:
        # deleting an id that is already gone is not an error
        query = self._query(ctx)
        try:
            query.delete().eq("id", record_id).execute()
        except Exception as e:
            logger.error("Error deleting record %s: %s", record_id, e)
            raise StoreError("删除失败，请重试", operation="delete", cause=e) from e
