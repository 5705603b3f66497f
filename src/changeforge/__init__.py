"""ChangeForge - 変更追跡・リバートエンジン

差分計算・変更サマリー・プラン単位の変更ログ・逆順リバートを提供する。
"""

__version__ = "0.1.0"
