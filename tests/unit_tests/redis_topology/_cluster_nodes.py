CLUSTER_NODES = """\
07c37dfeb235213a872192d90877d0cd55635b91 172.17.0.3:7004@17004 slave e7d1eecce10fd6bb5eb35b9f99a514335d9ba9ca 0 1426238317239 4 connected
67ed2db8d677e59ec4a4cefb06858cf2a1a89fa1 172.17.0.2:7002@17002 master - 0 1426238316232 2 connected 5461-10922
292f8b365bb7edb5e285caf0b7e6ddc7265d2f4f 172.17.0.3:7003@17003 slave 67ed2db8d677e59ec4a4cefb06858cf2a1a89fa1 0 1426238318243 3 connected
6ec23923021cf3ffec47632106199cb7f496ce01 172.17.0.2:7005@17005 slave 67ed2db8d677e59ec4a4cefb06858cf2a1a89fa1 0 1426238316232 5 connected
824fe116063bc5fcf9f4ffd895bc17aee7731ac3 172.17.0.4:7006@17006 master - 0 1426238317741 6 connected 10923-16383 [10924->-67ed2db8d677e59ec4a4cefb06858cf2a1a89fa1]
e7d1eecce10fd6bb5eb35b9f99a514335d9ba9ca 172.17.0.2:7001@17001 myself,master - 0 0 1 connected 0-5460
"""
