from enum import Enum


class ErrorType(str, Enum):
    '''
    工具调用失败的结构化分类

    INPUT_ERROR: 引用的项目/条目不存在，或修改了不允许修改的字段。请求方核对输入后重试
    SCHEMA_ERROR: 入参不满足 LaborEntryInput / MaterialEntryInput / SubcontractorEntryInput 的结构要求
    TOOL_NOT_ALLOWED: 当前调用方不允许使用该 tool
    CONCURRENCY_CONFLICT: actuals 在多次重试内持续被并发修改。稍后重试
    DATABASE_ERROR: 存储不可用（连接、锁、磁盘）。条目未写入，可重试
    SYSTEM_ERROR: 未知异常或未分类异常
    '''
    INPUT_ERROR = "INPUT_ERROR"
    SCHEMA_ERROR = "SCHEMA_ERROR"
    TOOL_NOT_ALLOWED = "TOOL_NOT_ALLOWED"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    DATABASE_ERROR = "DATABASE_ERROR"
    SYSTEM_ERROR = "SYSTEM_ERROR"
