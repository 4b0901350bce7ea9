"""voiceplayer 机器人主实现"""
import logging
from typing import Optional
import discord
from discord.ext import commands

from voiceplayer.core.errors import PlayerError
from voiceplayer.core.interfaces import IQueue
from voiceplayer.player import Player
from voiceplayer.utils.config_manager import ConfigManager


class VoicePlayerBot:
    """
    voiceplayer 机器人

    组装 Discord 机器人与播放器：
    - join / leave 命令管理服务器队列
    - 生命周期通知发送到发起命令的文本频道
    """

    def __init__(self, config: ConfigManager):
        """
        初始化机器人

        Args:
            config: 配置管理器
        """
        self.logger = logging.getLogger("voiceplayer.bot")
        self.config = config

        intents = discord.Intents.default()
        intents.message_content = True
        intents.voice_states = True

        self.bot = commands.Bot(
            command_prefix=self.config.get_command_prefix(),
            intents=intents,
        )

        self.player = Player(self.bot, self.config.get_player_options())

        self._register_events()
        self._register_notifications()
        self._register_commands()

        self.logger.info("🎵 机器人初始化成功")

    def _register_events(self) -> None:
        """注册 Discord 事件处理器"""
        @self.bot.event
        async def on_ready():
            if self.bot.user is None:
                self.logger.error("机器人用户在 on_ready 事件中为 None")
                return
            self.logger.info(f"🎵 机器人已就绪。登录为 {self.bot.user.name} ({self.bot.user.id})")

        @self.bot.event
        async def on_command_error(ctx: commands.Context, error: Exception):
            await self._on_command_error(ctx, error)

    def _register_notifications(self) -> None:
        """将播放器通知转发到队列绑定的文本频道"""
        messages = {
            "client_disconnect": "🔌 我已被断开语音连接，队列已清除。",
            "client_undeafen": "🔈 我被解除了服务器闭麦。",
            "channel_empty": "👋 语音频道已无其他成员，已自动离开。",
        }

        for event_type, text in messages.items():
            self.player.add_event_handler(event_type, self._make_notifier(event_type, text))

    def _make_notifier(self, event_type: str, text: str):
        async def notify(queue: IQueue) -> None:
            self.logger.info(f"播放器事件 {event_type} - 服务器 {queue.guild_id}")
            channel = self._get_text_channel(queue)
            if channel is not None:
                await channel.send(text)

        notify.__name__ = f"notify_{event_type}"
        return notify

    def _get_text_channel(self, queue: IQueue) -> Optional[discord.abc.Messageable]:
        data = queue.data if isinstance(queue.data, dict) else {}
        channel_id = data.get("text_channel_id")
        if channel_id is None:
            return None
        return self.bot.get_channel(channel_id)

    def _register_commands(self) -> None:
        """注册 join / leave 命令"""
        @self.bot.command(name="join")
        @commands.guild_only()
        async def join(ctx: commands.Context):
            voice = getattr(ctx.author, "voice", None)
            if voice is None or voice.channel is None:
                await ctx.reply("❌ 您需要先加入一个语音频道。")
                return

            queue = self.player.create_queue(ctx.guild.id, data={"text_channel_id": ctx.channel.id})
            await queue.join(voice.channel)
            await ctx.reply(f"✅ 已加入 {voice.channel.name}")

        @self.bot.command(name="leave")
        @commands.guild_only()
        async def leave(ctx: commands.Context):
            queue = self.player.get_queue(ctx.guild.id)
            if queue is None or queue.destroyed:
                await ctx.reply("❌ 当前没有活动的队列。")
                return

            await queue.leave()
            await ctx.reply("👋 已离开语音频道。")

    async def _on_command_error(self, ctx: commands.Context, error: Exception) -> None:
        """
        处理命令错误

        Args:
            ctx: 命令上下文
            error: 发生的异常
        """
        if isinstance(error, commands.CommandNotFound):
            return

        original = getattr(error, "original", error)
        if isinstance(original, PlayerError):
            self.logger.warning(f"命令 {ctx.command} 播放器错误: {original}")
            await ctx.reply(f"❌ {original.message}")
        elif isinstance(error, commands.NoPrivateMessage):
            await ctx.reply("❌ 此命令不能在私信中使用。")
        else:
            self.logger.error(f"命令 {ctx.command} 中的意外错误: {error}", exc_info=True)
            await ctx.reply(f"❌ 发生意外错误: {str(error)}")

    def run(self, token: str) -> None:
        """启动机器人（阻塞）"""
        self.bot.run(token, log_handler=None)
