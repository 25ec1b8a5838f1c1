"""
配置包
环境变量 (.env) 与 YAML 配置 (config.yaml / user_config.yaml) 的统一入口。
"""
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

def load_environment(dotenv_path: str = None) -> bool:
    """
    从.env文件加载环境变量到环境中，已存在的环境变量不会被覆盖。
    """
    loaded = load_dotenv(dotenv_path)
    if loaded:
        logger.debug("环境变量已从 .env 文件加载。")
    return loaded
