"""
配置加载器
读取 config.yaml 并叠加 user_config.yaml；文件缺失时使用内置默认值。
"""
import copy
import yaml
import os
import logging
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "context": {
        "max_length": 8000, # 上下文最大字符数，超出时压缩
    },
    "storage": {
        "project_root": "data/project",
    },
    "logging": {
        "level": "INFO",
        "dir": "logs",
    },
}

def get_config_path() -> str:
    return os.getenv("CONTEXT_CONFIG_PATH", "config.yaml")

def get_user_config_path() -> str:
    return os.getenv("CONTEXT_USER_CONFIG_PATH", "user_config.yaml")

def _merge_configs(base_config: dict, user_config: dict) -> dict:
    """
    合并基础配置和用户配置。
    用户配置中的各个分区会覆盖或扩展基础配置的同名分区。
    """
    merged_config = copy.deepcopy(base_config)

    for section, values in user_config.items():
        if isinstance(values, dict) and isinstance(merged_config.get(section), dict):
            merged_config[section].update(values)
        else:
            merged_config[section] = values

    return merged_config

def _load_yaml(path: str) -> dict:
    try:
        if not os.path.exists(path):
            return {}
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"错误: {path} 顶层必须是映射")
        return data or {}
    except yaml.YAMLError as e:
        logger.error(f"解析 {path} 文件失败: {e}", exc_info=True)
        raise ConfigurationError(f"错误: 解析 {path} 文件失败: {e}")

def load_user_config() -> dict:
    """
    加载并解析 user_config.yaml 文件。
    """
    return _load_yaml(get_user_config_path())

def load_config() -> dict:
    """
    加载默认配置、config.yaml 与 user_config.yaml，并依次合并。
    """
    base_config = _merge_configs(DEFAULT_CONFIG, _load_yaml(get_config_path()))
    return _merge_configs(base_config, load_user_config())

def get_max_length(config: dict) -> int:
    """读取上下文长度预算"""
    value = config.get("context", {}).get("max_length", DEFAULT_CONFIG["context"]["max_length"])
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"错误: context.max_length 必须是整数，实际为 {value!r}")
