# backend/weekly_report/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- 週報生成エンドポイント（/generate-report, /api/generate-report）を公開する
- Notion 連携の診断エンドポイント（/notion/check-access, /notion/check-token）を公開する
- セットアップ手順ページ（/setup）を返す
"""

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, PlainTextResponse

from weekly_report.automation.router import router as report_router
from weekly_report.notion.router import router as notion_router

SETUP_HTML = """<!DOCTYPE html>
<html lang="ja">
<head><meta charset="utf-8"><title>Notion 週報ジェネレーター セットアップ</title></head>
<body>
<h1>Notion 週報ジェネレーター セットアップ</h1>
<ol>
  <li>https://www.notion.so/my-integrations でインテグレーションを作成し、トークンを
      <code>NOTION_API_KEY</code> に設定します。</li>
  <li>監視したいページを開き、「…」→「コネクト」からインテグレーションを追加します。</li>
  <li>監視するページ ID をカンマ区切りで <code>NOTION_PAGE_IDS</code> に設定します。</li>
  <li>週報の書き込み先（ページまたはデータベース）の ID を <code>NOTION_REPORT_PARENT_ID</code>
      に設定します。省略時は先頭の監視ページに作成します。</li>
  <li>OpenAI の API キーを <code>OPENAI_API_KEY</code> に設定します。</li>
  <li><a href="/notion/check-token">/notion/check-token</a> と
      <a href="/notion/check-access">/notion/check-access</a> で設定を確認します。</li>
  <li><a href="/generate-report">/generate-report</a> で週報を手動生成できます。</li>
</ol>
<p>定期実行は cron から <code>python -m weekly_report.automation.jobs weekly</code> を呼び出します
（例: <code>CRON_TZ=Asia/Tokyo</code> / <code>0 20 * * 0</code>）。
ジョブは起動中のサーバーを <code>REPORT_SERVER_URL</code> 経由で呼び出すため、サーバーを起動しておく必要があります。</p>
</body>
</html>
"""


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - 週報生成エンドポイント
    - Notion 診断エンドポイント (/notion/*)
    - ヘルスチェックエンドポイント (/health)
    """
    app = FastAPI(title="Notion Weekly Report Generator")

    # ルーター登録
    app.include_router(report_router)
    app.include_router(notion_router)

    @app.get("/", response_class=PlainTextResponse, tags=["health"])
    def root() -> str:
        return "Notion Weekly Report Generator is running!"

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    @app.get("/setup", response_class=HTMLResponse, tags=["health"])
    def setup_instructions() -> str:
        return SETUP_HTML

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()


if __name__ == "__main__":
    import uvicorn

    from weekly_report.automation.config import get_report_config

    uvicorn.run(app, host="0.0.0.0", port=get_report_config().port)
