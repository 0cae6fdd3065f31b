"""基础设施层: 请求级日志上下文等框架适配."""
