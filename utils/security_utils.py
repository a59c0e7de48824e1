"""
安全工具模块
提供安全HTTP头和内存限流器
"""

import math
import time
from collections import deque
from typing import Callable, Deque, Dict


class SecurityHeaders:
    """安全HTTP头"""

    @staticmethod
    def get_security_headers() -> Dict[str, str]:
        """获取安全HTTP头"""
        return {
            'X-Content-Type-Options': 'nosniff',
            'X-Frame-Options': 'DENY',
            'X-XSS-Protection': '0',
            'X-DNS-Prefetch-Control': 'off',
            'X-Download-Options': 'noopen',
            'X-Permitted-Cross-Domain-Policies': 'none',
            'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
            'Content-Security-Policy': "default-src 'self'",
            'Cross-Origin-Opener-Policy': 'same-origin',
            'Cross-Origin-Resource-Policy': 'same-origin',
            'Referrer-Policy': 'no-referrer'
        }


class RateLimiter:
    """简单的内存滑动窗口限流器"""

    def __init__(self, max_requests: int = 60, window_seconds: float = 60,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_cleanup = clock()
        self.requests: Dict[str, Deque[float]] = {}

    def _prune(self, identifier: str, now: float) -> Deque[float]:
        """清理窗口外的请求记录（不为未知客户端建档）"""
        timestamps = self.requests.get(identifier)
        if timestamps is None:
            return deque()
        window_start = now - self.window_seconds
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()
        return timestamps

    def is_allowed(self, identifier: str) -> bool:
        """检查是否允许请求，允许时记录本次请求"""
        now = self._clock()

        # 每个窗口最多全量清扫一次空闲客户端
        if now - self._last_cleanup >= self.window_seconds:
            self.cleanup()

        timestamps = self._prune(identifier, now)
        if len(timestamps) >= self.max_requests:
            return False

        self.requests.setdefault(identifier, timestamps).append(now)
        return True

    def get_remaining_requests(self, identifier: str) -> int:
        """获取剩余请求次数"""
        timestamps = self._prune(identifier, self._clock())
        return max(0, self.max_requests - len(timestamps))

    def get_reset_seconds(self, identifier: str) -> int:
        """距离最早一条记录滑出窗口的秒数"""
        now = self._clock()
        timestamps = self._prune(identifier, now)
        if not timestamps:
            return 0
        return max(0, math.ceil(timestamps[0] + self.window_seconds - now))

    def cleanup(self) -> None:
        """移除已经没有有效记录的客户端"""
        now = self._clock()
        self._last_cleanup = now
        for identifier in list(self.requests):
            if not self._prune(identifier, now):
                del self.requests[identifier]
