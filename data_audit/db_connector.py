"""
MySQL 레코드 소스
=================
감사 대상 테이블의 레코드를 메모리 데이터셋({테이블명: [레코드, ...]})으로 적재합니다.

  - 조회 전용: 읽기 전용 트랜잭션, 감사 결과는 DB에 기록하지 않음
  - 한 번의 감사에 쓰이는 테이블은 같은 스냅샷(consistent snapshot)에서 읽음
  - 풀 생성 실패 시 재시도 (Docker MySQL 초기화 대기)
"""

import re
import time
import logging
from contextlib import contextmanager
from typing import Optional

from mysql.connector import pooling, Error as MySQLError

logger = logging.getLogger(__name__)

# 테이블명은 쿼리에 직접 삽입되므로 식별자 형식만 허용 (schema.table 허용)
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

FETCH_BATCH_SIZE = 5000


class DBConnector:
    """감사 대상 레코드 조회용 MySQL 커넥터"""

    def __init__(self, db_config: dict, pool_size: int = 5,
                 max_retries: int = 10, retry_interval: int = 3):
        """
        Args:
            db_config: DB 접속 정보 (ConfigLoader.load_db_config 결과)
            pool_size: 커넥션 풀 크기
            max_retries: 풀 생성 최대 시도 횟수
            retry_interval: 재시도 간격 (초)

        Raises:
            ConnectionError: max_retries회 모두 실패한 경우
        """
        self.db_config = db_config
        self.address = f"{db_config['host']}:{db_config.get('port', 3306)}"
        self.pool: Optional[pooling.MySQLConnectionPool] = self._create_pool(
            pool_size, max_retries, retry_interval
        )

    def _pool_options(self, pool_size: int) -> dict:
        cfg = self.db_config
        return {
            "pool_name": "audit_pool",
            "pool_size": pool_size,
            "pool_reset_session": True,
            "host": cfg["host"],
            "port": cfg.get("port", 3306),
            "user": cfg["user"],
            "password": cfg["password"],
            "database": cfg["database"],
            "charset": cfg.get("charset", "utf8mb4"),
            "connect_timeout": cfg.get("connect_timeout", 30),
            # 대용량 테이블 전체 조회
            "read_timeout": cfg.get("read_timeout", 300),
        }

    def _create_pool(self, pool_size: int, max_retries: int, retry_interval: int):
        options = self._pool_options(pool_size)
        last_error = None

        for attempt in range(1, max_retries + 1):
            try:
                pool = pooling.MySQLConnectionPool(**options)
                logger.info("✅ MySQL 커넥션 풀 준비 완료: %s (시도 %d/%d)",
                            self.address, attempt, max_retries)
                return pool
            except MySQLError as e:
                last_error = e
                logger.warning("⚠️  MySQL 연결 실패 (%d/%d): %s", attempt, max_retries, e)
                if attempt < max_retries:
                    time.sleep(retry_interval)

        raise ConnectionError(
            f"MySQL 연결 실패: {self.address} ({max_retries}회 시도) - {last_error}"
        )

    @contextmanager
    def snapshot(self):
        """
        읽기 전용 + consistent snapshot 트랜잭션으로 연결을 제공합니다.

        Usage:
            with connector.snapshot() as conn:
                rows = connector.fetch_table("card_transactions", conn=conn)
        """
        if self.pool is None:
            raise ConnectionError("커넥션 풀이 이미 종료되었습니다.")

        conn = self.pool.get_connection()
        try:
            conn.start_transaction(consistent_snapshot=True, readonly=True)
            yield conn
        except MySQLError as e:
            logger.error("DB 에러: %s", e)
            raise
        finally:
            if conn.is_connected():
                if conn.in_transaction:
                    conn.rollback()
                conn.close()

    def fetch_table(self, table: str, limit: int = None, conn=None) -> list[dict]:
        """
        테이블 전체 (또는 상위 limit건) 레코드를 딕셔너리 리스트로 조회합니다.

        Raises:
            ValueError: 테이블명이 식별자 형식이 아닌 경우
        """
        if not _IDENTIFIER.match(table):
            raise ValueError(f"잘못된 테이블명: {table!r}")

        if conn is None:
            with self.snapshot() as own_conn:
                return self.fetch_table(table, limit, conn=own_conn)

        query = f"SELECT * FROM {table}"
        params = None
        if limit:
            query += " LIMIT %s"
            params = (int(limit),)

        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(query, params)
            records = []
            while True:
                batch = cursor.fetchmany(FETCH_BATCH_SIZE)
                if not batch:
                    break
                records.extend(batch)
            return records
        finally:
            cursor.close()

    def fetch_dataset(self, tables, limit: int = None) -> dict[str, list[dict]]:
        """
        여러 테이블을 같은 스냅샷에서 조회하여 {테이블명: 레코드 리스트}로 반환합니다.
        """
        dataset = {}
        with self.snapshot() as conn:
            for table in tables:
                dataset[table] = self.fetch_table(table, limit, conn=conn)
                logger.info("   📥 %s: %d건 적재", table, len(dataset[table]))
        return dataset

    def close(self):
        if self.pool is not None:
            logger.info("MySQL 커넥션 풀 해제: %s", self.address)
            self.pool = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
