import logging
import logging.config
from pathlib import Path
import yaml


def setup_logging(config_path: Path, debug: bool = False):
    """
    YAML 파일에서 로깅 설정을 로드합니다.

    Args:
        config_path (Path): 로깅 설정 YAML 파일 경로.
        debug (bool): True이면 root 로거 레벨을 DEBUG로 낮춥니다 (개발 모드).

    Returns:
        None

    Note:
        파일이 없거나 YAML 파싱에 실패하면 logging.basicConfig(level=INFO)로 대체합니다.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as file:
            config = yaml.safe_load(file)
            logging.config.dictConfig(config)
    except FileNotFoundError as fnf_error:
        print(f"Logging config file not found: {fnf_error}")
        logging.basicConfig(level=logging.INFO)
    except yaml.YAMLError as yaml_error:
        print(f"Error parsing YAML logging config: {yaml_error}")
        logging.basicConfig(level=logging.INFO)

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
