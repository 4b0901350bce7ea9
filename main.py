#!/usr/bin/env python3
"""
voiceplayer 机器人入口

负责配置加载、日志设置、机器人初始化和启动/关闭处理。
"""
import logging

from voiceplayer.bot import VoicePlayerBot
from voiceplayer.utils.config_manager import ConfigManager
from voiceplayer.utils.logger import setup_logger


def main() -> int:
    """
    机器人主入口函数

    Returns:
        int: 退出代码（0表示成功，1表示错误）
    """
    try:
        config = ConfigManager()
    except FileNotFoundError as e:
        logging.basicConfig(level=logging.ERROR)
        logging.getLogger("voiceplayer").error(f"❌ 配置文件错误: {e}")
        return 1

    setup_logger(
        log_level=config.get_log_level(),
        log_file=config.get_log_file(),
        max_size=config.get_log_max_size(),
        backup_count=config.get_log_backup_count()
    )
    logger = logging.getLogger("voiceplayer")

    logger.info("=" * 60)
    logger.info("🎵 voiceplayer 机器人启动中...")
    logger.info("=" * 60)
    logger.debug(f"日志配置完成 - 级别: {config.get_log_level()}, 文件: {config.get_log_file()}")

    try:
        try:
            discord_token = config.get_discord_token()
        except ValueError as e:
            logger.error(f"❌ Discord 令牌配置错误: {e}")
            logger.error("请检查 config/config.yaml 文件并确保 Discord 令牌已正确设置")
            return 1

        bot = VoicePlayerBot(config)
        _log_player_configuration(logger, bot)

        logger.info("🚀 启动机器人...")
        logger.info("按 Ctrl+C 停止机器人")
        bot.run(discord_token)

    except KeyboardInterrupt:
        logger.info("🛑 用户停止了机器人 (Ctrl+C)")
        return 0
    except Exception as e:
        logger.error(f"❌ 启动机器人时发生意外错误: {e}", exc_info=True)
        return 1

    return 0


def _log_player_configuration(logger: logging.Logger, bot: VoicePlayerBot) -> None:
    """记录播放器默认选项摘要"""
    options = bot.player.options
    logger.info("📋 播放器配置摘要:")
    logger.info(f"   加入时闭麦: {'✅' if options.deafen_on_join else '❌'}")
    logger.info(f"   频道为空时离开: {'✅' if options.leave_on_empty else '❌'}")
    logger.info(f"   空频道复查延迟: {options.timeout} 秒")
    logger.info(f"   结果缓存: {options.cache_path if options.cache and options.cache_path else '❌ 已禁用'}")
    logger.info("=" * 60)


if __name__ == "__main__":
    exit(main())
