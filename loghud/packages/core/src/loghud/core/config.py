"""配置常量模块 -- 可通过环境变量覆盖

包含消息缓冲上限、去重索引容量、重连间隔、默认模板等可配置常量。
缓冲上限与重连间隔的环境变量由 loghud.panel.config 读取并校验，
这里只保存默认值。
"""

import os

# 有序消息序列最大条数（超过时从头部裁剪）
MAX_MESSAGES: int = 50_000

# 去重索引容量（超过时按时间窗口裁剪）
SEEN_CAPACITY: int = 100_000

# 去重索引保留窗口：最近插入时间戳之前 10 分钟
SEEN_TTL_NS: int = 10 * 60 * 1_000_000_000

# 断线重连间隔（秒）
RECONNECT_DELAY_S: float = 1.5

# 重连间隔上限（秒，仅指数退避时生效）
RECONNECT_MAX_DELAY_S: float = 30.0

# 单帧最大字节数
MAX_FRAME_BYTES: int = int(
    os.environ.get("LOGHUD_MAX_FRAME_BYTES", str(4 * 1024 * 1024))
)

# 展示时间格式（yyyy-MM-dd HH:mm:ss）
TIME_FORMAT: str = "%Y-%m-%d %H:%M:%S"

# 默认端点与频道
DEFAULT_ENDPOINT: str = "http://localhost:8080"
DEFAULT_CHANNEL_PATH: str = "/events/app1"

# 默认展示模板
DEFAULT_TEMPLATE: str = (
    "second($DTIME) primary(${.title}) normal(max(${.message},120)) debug($LAST6)"
)

# 短 id 长度（$LAST6 与列表展示）
SHORT_ID_LENGTH: int = 6
