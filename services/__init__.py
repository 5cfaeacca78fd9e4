"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- PayoffService：勝負判定與獎金分配
- CommitmentService：commit-reveal 的 hash 與驗證
- EventService：遊戲事件紀錄
"""
