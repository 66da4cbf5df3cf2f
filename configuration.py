from root import get_project_root
import utils
from pathlib import Path

p = Path(__file__).resolve()


class Configuration:
    # DIRECTORIES
    root_dir = get_project_root()
    input_dir = Path(root_dir, "input")
    output_dir = Path(root_dir, "output")
    cache_dir = Path(root_dir, "cache")
    log_dir = Path(root_dir, "logs")

    # PROJECT SETUP
    utils.load_env_file(Path(root_dir, ".env"))
    gitee_tokens = utils.read_comma_list("GITEE_TOKENS")

    # GITEE METRICS PROPERTIES
    gitee_host = "gitee.com"
    gitee_api_base_url = "https://gitee.com/api/v5"
    gitee_user_agent = "landscape-gitee-collector"
    gitee_request_timeout_seconds = 30
    gitee_cache_ttl_days = 7
    gitee_participation_weeks = 52
    gitee_commits_page_size = 100
    # keep an expired cache entry when its refresh fails instead of dropping it
    gitee_carry_forward_stale = False

    # FILE NAMES
    landscape_file_name = "landscape.json"
    gitee_cache_file_name = "gitee.json"
    gitee_data_file_name = "gitee-data.json"
    enriched_landscape_file_name = "landscape-gitee.json"
