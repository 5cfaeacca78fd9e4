"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- GameRegistry：遊戲狀態機（create -> join -> settle | cancel | claim）
- EscrowLedger：內部餘額與外部 token 轉帳
- TokenLedger：外部 token ledger 的介面
- Locks：並發控制工具
"""
