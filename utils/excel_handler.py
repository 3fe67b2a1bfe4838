"""
Excel 処理ユーティリティ
参加申請やお問い合わせの一覧を Excel ファイルとして出力する
"""

import pandas as pd
from io import BytesIO

STATUS_LABELS = {
    'pending': '承認待ち',
    'approved': '承認済み',
    'rejected': '却下',
    'unread': '未読',
    'read': '既読',
    'replied': '返信済み',
}


class ExcelHandler:
    def __init__(self):
        self.participation_columns = [
            ('user_name', '申請者', 15),
            ('user_email', 'メールアドレス', 28),
            ('event_name', 'イベント名', 30),
            ('event_date', '開催日', 16),
            ('event_venue', '会場', 20),
            ('message', 'メッセージ', 40),
            ('status', 'ステータス', 12),
            ('created_at', '申請日時', 22),
            ('processed_at', '処理日時', 22),
        ]
        self.inquiry_columns = [
            ('created_at', '受信日時', 22),
            ('user_name', 'お名前', 15),
            ('user_email', 'メールアドレス', 28),
            ('subject', '件名', 30),
            ('message', '内容', 50),
            ('status', 'ステータス', 12),
            ('reply', '返信内容', 50),
            ('replied_at', '返信日時', 22),
        ]

    def _build_workbook(self, records, columns, sheet_name):
        rows = []
        for record in records:
            row = {}
            for key, label, _ in columns:
                value = record.get(key)
                if key == 'status':
                    value = STATUS_LABELS.get(value, value)
                row[label] = '' if value is None else value
            rows.append(row)

        df = pd.DataFrame(rows, columns=[label for _, label, _ in columns])

        output = BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name=sheet_name, index=False)

            # 列幅を設定
            worksheet = writer.sheets[sheet_name]
            for index, (_, _, width) in enumerate(columns):
                column_letter = chr(ord('A') + index)
                worksheet.column_dimensions[column_letter].width = width

        output.seek(0)
        return output.getvalue()

    def export_participation_requests(self, requests):
        """参加申請一覧を出力"""
        return self._build_workbook(requests, self.participation_columns, '参加申請')

    def export_inquiries(self, inquiries):
        """お問い合わせ一覧を出力"""
        return self._build_workbook(inquiries, self.inquiry_columns, 'お問い合わせ')

    def read_sheet(self, file_content, sheet_name):
        """出力したファイルを読み戻す（確認用）"""
        df = pd.read_excel(BytesIO(file_content), sheet_name=sheet_name)
        return df.fillna('').to_dict(orient='records')
