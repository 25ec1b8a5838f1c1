"""事实存储 (SQLite) 访问层。"""
